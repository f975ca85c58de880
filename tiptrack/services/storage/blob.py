"""
Key-Value Blob Clients

Low-level clients that hold JSON-serializable values under string keys.
The tracker storage sits on top of one of these.

- JsonFileClient: a single JSON document on disk (the default)
- InMemoryClient: a plain dict, for tests and throwaway sessions

TRADEOFFS:
- The whole document is rewritten on every change (fine for a few
  thousand shifts)
- Writes go to a temporary file that then replaces the real one, so a
  crash mid-write never leaves a half-written document
- No locking; two processes writing at once means the last one wins
"""

import copy
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, Optional

from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from tiptrack.config import get_settings
from tiptrack.services.storage.interface import ConnectionError, SerializationError


class BlobClient(ABC):
    """Minimal key-value contract used by the tracker storage."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[Any]:
        """Value stored under key, or None."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def remove_items(self, keys: Iterable[str]) -> None:
        pass

    def has_item(self, key: str) -> bool:
        return self.get_item(key) is not None


class InMemoryClient(BlobClient):
    """Dict-backed client. Values are deep-copied in and out."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, Any] = copy.deepcopy(initial or {})

    def get_item(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._data.get(key))

    def set_item(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def remove_items(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)


class JsonFileClient(BlobClient):
    """
    Stores all keys in one JSON document.

    Reads and writes are retried with exponential backoff on OSError,
    which covers transient failures such as a file briefly locked by a
    sync tool or antivirus scanner.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        retries: Optional[int] = None,
    ):
        storage_settings = get_settings().storage
        self._path = Path(path) if path is not None else storage_settings.data_path
        self._retrying = Retrying(
            stop=stop_after_attempt(retries or storage_settings.write_retries),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        text = self._path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Data file {self._path} is not valid JSON: {e}") from e
        if not isinstance(document, dict):
            raise SerializationError(
                f"Data file {self._path} must contain a JSON object, "
                f"found {type(document).__name__}"
            )
        return document

    def _write_document(self, document: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _load(self) -> dict[str, Any]:
        try:
            return self._retrying(self._read_document)
        except OSError as e:
            raise ConnectionError(f"Failed to read {self._path}: {e}") from e

    def _save(self, document: dict[str, Any]) -> None:
        try:
            self._retrying(self._write_document, document)
        except OSError as e:
            raise ConnectionError(f"Failed to write {self._path}: {e}") from e
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Data could not be serialized: {e}") from e

    def get_item(self, key: str) -> Optional[Any]:
        return self._load().get(key)

    def set_item(self, key: str, value: Any) -> None:
        document = self._load()
        document[key] = value
        self._save(document)

    def remove_items(self, keys: Iterable[str]) -> None:
        document = self._load()
        for key in keys:
            document.pop(key, None)
        self._save(document)
