"""Mini README: Abstract key/value storage used to persist tracker state.

Structure:
    * StorageError - raised when a backend cannot write a slot.
    * KeyValueStorage - string-in, string-out slot interface.

The interface mirrors a browser's local storage: every slot holds one
JSON-encoded document under a string key, reads of unknown keys return
``None`` and writes replace the whole slot. Backends never interpret the
stored text; encoding and decoding belong to the transaction store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


class StorageError(RuntimeError):
    """Raised when a storage slot cannot be written."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Could not persist slot '{key}': {reason}")
        self.key = key
        self.reason = reason


class KeyValueStorage(ABC):
    """Base interface for persistence backends."""

    backend_name: str = "generic"

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the raw text stored under ``key`` or ``None`` when absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Replace the slot ``key`` with ``value``, raising ``StorageError`` on failure."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete the slot if present."""

    def metadata(self) -> Dict[str, str]:
        """Return diagnostic metadata for status displays."""

        return {"backend": self.backend_name}
