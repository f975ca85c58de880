"""
Storage Services Package

Provides the abstract storage interface and the local key-value
implementation (JSON file by default, in-memory for tests).
"""

from tiptrack.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    NotFoundError,
    SerializationError,
    StorageError,
    TrackerStorageInterface,
)
from tiptrack.services.storage.blob import (
    BlobClient,
    InMemoryClient,
    JsonFileClient,
)
from tiptrack.services.storage.local import LocalTrackerStorage

__all__ = [
    # Interfaces
    "BlobClient",
    "TrackerStorageInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "SerializationError",
    "StorageError",
    # Implementations
    "InMemoryClient",
    "JsonFileClient",
    "LocalTrackerStorage",
]
