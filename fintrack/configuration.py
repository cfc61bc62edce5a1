"""Mini README: Centralised configuration for FinTrack.

Structure:
    * FinTrackSettings - Pydantic settings model for storage and interface options.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to locate the data directory, pick the storage
    backend, name storage slots and exported files, and bind the web
    interface. Values come from ``FINTRACK_*`` environment variables or a
    local ``.env`` file and are validated once per process.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings

STORAGE_BACKENDS = ("file", "memory")


class FinTrackSettings(BaseSettings):
    """Runtime configuration for the finance tracker."""

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    data_directory: Path = Field(
        Path("data"),
        description="Directory where the file storage backend keeps its slots.",
    )
    storage_backend: str = Field(
        "file",
        description="Persistence backend: 'file' writes JSON slots, 'memory' keeps them in-process.",
    )
    storage_prefix: str = Field(
        "my-finance-app",
        description="Prefix shared by the transactions, categories and budget slot keys.",
    )
    export_prefix: str = Field(
        "meu_sistema_financeiro",
        description="Filename prefix used for exported JSON documents.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the web interface to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Default port the web interface exposes.",
        ge=1,
        le=65535,
    )
    log_level: str = Field(
        "INFO",
        description="Root logger level applied by the command line entry point.",
    )

    class Config:
        env_prefix = "FINTRACK_"
        env_file = ".env"
        case_sensitive = False

    @validator("data_directory", pre=True)
    def _expand_path(cls, value: Optional[str | Path]) -> Path:
        """Ensure configured paths expand user directories and exist."""

        path = Path(value).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @validator("storage_backend")
    def _known_backend(cls, value: str) -> str:
        """Reject storage backends that ``create_storage`` cannot build."""

        normalised = value.strip().lower()
        if normalised not in STORAGE_BACKENDS:
            raise ValueError(f"storage_backend must be one of {', '.join(STORAGE_BACKENDS)}")
        return normalised


@lru_cache()
def get_settings() -> FinTrackSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return FinTrackSettings()
