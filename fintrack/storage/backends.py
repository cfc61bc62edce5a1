"""Mini README: Concrete storage backends and the settings-driven factory.

Structure:
    * MemoryStorage - dictionary backed slots for tests and throwaway sessions.
    * JsonFileStorage - one ``<key>.json`` file per slot inside a directory.
    * create_storage - build the backend selected in ``FinTrackSettings``.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Dict, Optional

from ..configuration import FinTrackSettings
from ..logging_utils import get_logger
from .base import KeyValueStorage, StorageError

LOGGER = get_logger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9._-]+$")


class MemoryStorage(KeyValueStorage):
    """Keep slots in a process-local dictionary."""

    backend_name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._slots: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(key, "only text values can be stored")
        self._slots[key] = value

    def remove_item(self, key: str) -> None:
        self._slots.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """Persist each slot as a UTF-8 text file under ``directory``."""

    backend_name = "file"

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        LOGGER.debug("File storage rooted at %s", self.directory)

    def _slot_path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Storage key '{key}' contains unsupported characters")
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._slot_path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as error:
            LOGGER.error("Unreadable storage slot %s treated as absent: %s", path, error)
            return None

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(key, "only text values can be stored")
        path = self._slot_path(key)
        temp_path = path.with_suffix(".json.tmp")
        try:
            temp_path.write_text(value, encoding="utf-8")
            os.replace(temp_path, path)
        except OSError as error:
            raise StorageError(key, str(error)) from error
        LOGGER.debug("Wrote %s characters to slot %s", len(value), key)

    def remove_item(self, key: str) -> None:
        path = self._slot_path(key)
        if path.exists():
            path.unlink()

    def metadata(self) -> Dict[str, str]:
        return {"backend": self.backend_name, "directory": str(self.directory)}


def create_storage(settings: FinTrackSettings) -> KeyValueStorage:
    """Instantiate the storage backend named in ``settings``."""

    if settings.storage_backend == "memory":
        LOGGER.info("Using in-memory storage; data will not survive restarts")
        return MemoryStorage()
    LOGGER.info("Using file storage in %s", settings.data_directory)
    return JsonFileStorage(settings.data_directory)
