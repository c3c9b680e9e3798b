"""Runtime configuration for the ElderCare API.

:class:`Settings` reads environment variables, then a ``.env`` file in the
working directory, then falls back to the defaults below.  Variable names are
the upper-case field names: ``DATABASE_PATH``, ``CORS_ORIGINS``,
``SEED_ON_STARTUP`` and so on.

``CORS_ORIGINS`` is a comma-separated list::

    CORS_ORIGINS=http://localhost:3000,https://eldercare.example.com

Typical usage::

    from eldercare.core.settings import Settings

    settings = Settings()
    app = create_app(settings)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

__all__ = ["DEFAULT_DATABASE_PATH", "Settings"]

logger = logging.getLogger(__name__)

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR"})
_LOG_FORMATS = frozenset({"text", "json"})
_MEMORY_DB = ":memory:"

#: Where the room database lives unless ``DATABASE_PATH`` says otherwise.
DEFAULT_DATABASE_PATH = "data/eldercare.db"


class Settings(BaseSettings):
    """Validated ElderCare configuration.

    Attributes:
        host: Interface uvicorn binds to.
        port: TCP port uvicorn listens on.
        cors_origins: Browser origins allowed to call the API.  ``["*"]``
            allows any origin.
        database_path: SQLite file, or ``":memory:"`` for a throwaway store.
        default_page_limit: Page size used when a listing request omits
            ``limit`` or sends a bad one.
        seed_on_startup: Replace every stored room with the sample rooms when
            the app starts.
        log_level: DEBUG, INFO, WARNING or ERROR.
        log_format: ``text`` or ``json``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = Field(default=5001, ge=1, le=65535)
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000"],
    )

    database_path: str = DEFAULT_DATABASE_PATH
    default_page_limit: int = Field(default=10, ge=1, le=100)
    seed_on_startup: bool = False

    log_level: str = "INFO"
    log_format: str = "text"

    # ------------------------------------------------------------------
    # Field validators
    # ------------------------------------------------------------------

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, v: object) -> object:
        if isinstance(v, str):
            return [origin.strip().rstrip("/") for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}, got {v!r}")
        return level

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, v: str) -> str:
        fmt = v.strip().lower()
        if fmt not in _LOG_FORMATS:
            raise ValueError(f"log_format must be one of {sorted(_LOG_FORMATS)}, got {v!r}")
        return fmt

    @model_validator(mode="after")
    def _check_wildcard_origin(self) -> Settings:
        if "*" in self.cors_origins and len(self.cors_origins) > 1:
            raise ValueError("cors_origins: '*' cannot be combined with explicit origins")
        return self

    # ------------------------------------------------------------------
    # Derived helpers
    # ------------------------------------------------------------------

    @property
    def uses_memory_db(self) -> bool:
        return self.database_path == _MEMORY_DB

    @property
    def database_path_resolved(self) -> Path:
        """Absolute path of the SQLite file.  Meaningless for an in-memory store."""
        return Path(self.database_path).expanduser().resolve()
