"""Mini README: Persistence backends for the finance tracker.

The ``base`` module defines the slot interface and its error type while
``backends`` holds the file and memory implementations plus the factory
that picks one from settings.
"""

from .backends import JsonFileStorage, MemoryStorage, create_storage
from .base import KeyValueStorage, StorageError

__all__ = [
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "StorageError",
    "create_storage",
]
