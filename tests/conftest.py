"""Shared pytest fixtures and configuration for the ElderCare test suite.

This file is loaded automatically by pytest before any test module.
It provides project-wide fixtures used across unit and integration tests.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator

import aiosqlite
import pytest
from pydantic_settings import SettingsConfigDict

from eldercare.core import configure_logging
from eldercare.core.models import Room
from eldercare.core.settings import Settings
from eldercare.storage.database import MEMORY_DB, open_db
from eldercare.storage.repository import RoomRepository
from eldercare.storage.sample_data import seed_rooms


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _configure_test_logging() -> None:
    """Force DEBUG logging in text format for every test.

    ``force=True`` applies the configuration even when pytest's own
    ``log_cli`` handler is already present.
    """
    configure_logging(level="DEBUG", fmt="text", force=True)


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every env var :class:`Settings` reads for the duration of a test.

    Also disables pydantic-settings ``.env`` file loading so a developer's
    local ``.env`` does not leak into Settings isolation tests.
    """
    prefixes = (
        "HOST",
        "PORT",
        "CORS_",
        "DATABASE_",
        "DEFAULT_PAGE",
        "SEED_",
        "LOG_LEVEL",
        "LOG_FORMAT",
    )
    for key in list(os.environ):
        if any(key.startswith(prefix) for prefix in prefixes):
            monkeypatch.delenv(key, raising=False)

    monkeypatch.setattr(
        Settings,
        "model_config",
        SettingsConfigDict(
            env_file=None,
            env_file_encoding="utf-8",
            extra="ignore",
        ),
    )


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


@pytest.fixture()
async def db_conn() -> AsyncIterator[aiosqlite.Connection]:
    """Open an in-memory database with the ElderCare schema applied."""
    conn = await open_db(MEMORY_DB)
    try:
        yield conn
    finally:
        await conn.close()


@pytest.fixture()
def repository(db_conn: aiosqlite.Connection) -> RoomRepository:
    """Empty room repository over :func:`db_conn`."""
    return RoomRepository(db_conn)


@pytest.fixture()
async def seeded(repository: RoomRepository) -> dict[str, Room]:
    """Store the sample rooms; return them keyed by facility name.

    Keys: ``"Artha Senior Care"``, ``"Aurum Senior Living"``,
    ``"NEMA Eldercare"``.
    """
    rooms = await seed_rooms(repository)
    return {room.facility_name: room for room in rooms}


# ---------------------------------------------------------------------------
# Misc helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def logger() -> logging.Logger:
    """Return a ``logging.Logger`` scoped to the running test."""
    return logging.getLogger("tests")
