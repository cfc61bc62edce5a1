"""Mini README: Tests for the key/value storage backends and configuration.

Covers file slot round trips, unsafe key rejection, write failures surfacing
as ``StorageError`` and the settings-driven factory.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from fintrack.configuration import FinTrackSettings
from fintrack.storage import JsonFileStorage, MemoryStorage, StorageError, create_storage


def test_file_storage_round_trip(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path / "slots")

    assert storage.get_item("my-finance-app-budget") is None
    storage.set_item("my-finance-app-budget", "120.5")

    assert storage.get_item("my-finance-app-budget") == "120.5"
    assert (tmp_path / "slots" / "my-finance-app-budget.json").exists()

    storage.remove_item("my-finance-app-budget")
    assert storage.get_item("my-finance-app-budget") is None


def test_file_storage_rejects_path_like_keys(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path)

    with pytest.raises(ValueError):
        storage.set_item("../escape", "1")


def test_file_storage_write_failure_raises_storage_error(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path)
    # a directory where the slot file should be makes the final replace fail
    (tmp_path / "blocked.json").mkdir()

    with pytest.raises(StorageError):
        storage.set_item("blocked", "[]")


def test_memory_storage_rejects_non_text() -> None:
    storage = MemoryStorage()

    with pytest.raises(StorageError):
        storage.set_item("slot", 5)  # type: ignore[arg-type]


def test_create_storage_follows_settings(tmp_path: Path) -> None:
    file_settings = FinTrackSettings(data_directory=tmp_path / "data", storage_backend="file")
    memory_settings = FinTrackSettings(data_directory=tmp_path / "data", storage_backend="MEMORY")

    file_storage = create_storage(file_settings)
    memory_storage = create_storage(memory_settings)

    assert isinstance(file_storage, JsonFileStorage)
    assert file_storage.metadata()["directory"] == str((tmp_path / "data").resolve())
    assert isinstance(memory_storage, MemoryStorage)


def test_settings_validation(tmp_path: Path) -> None:
    settings = FinTrackSettings(data_directory=tmp_path / "nested" / "dir")

    assert settings.data_directory.is_dir()
    assert settings.storage_prefix == "my-finance-app"

    with pytest.raises(ValueError):
        FinTrackSettings(data_directory=tmp_path, storage_backend="redis")
    with pytest.raises(ValueError):
        FinTrackSettings(data_directory=tmp_path, interface_port=0)
