"""SQLite-backed room store: connection setup, repository, and sample data."""

from eldercare.storage.database import DEFAULT_DB_PATH, MEMORY_DB, create_schema, open_db
from eldercare.storage.repository import RoomPage, RoomRepository, RoomStatistics
from eldercare.storage.sample_data import SAMPLE_ROOMS, seed_rooms

__all__ = [
    "DEFAULT_DB_PATH",
    "MEMORY_DB",
    "open_db",
    "create_schema",
    "RoomRepository",
    "RoomPage",
    "RoomStatistics",
    "SAMPLE_ROOMS",
    "seed_rooms",
]
