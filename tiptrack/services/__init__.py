"""Services package."""

from tiptrack.services.storage import (
    BlobClient,
    ConnectionError,
    DuplicateError,
    InMemoryClient,
    JsonFileClient,
    LocalTrackerStorage,
    NotFoundError,
    SerializationError,
    StorageError,
    TrackerStorageInterface,
)

__all__ = [
    "BlobClient",
    "ConnectionError",
    "DuplicateError",
    "InMemoryClient",
    "JsonFileClient",
    "LocalTrackerStorage",
    "NotFoundError",
    "SerializationError",
    "StorageError",
    "TrackerStorageInterface",
]
