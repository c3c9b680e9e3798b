"""SQLite connection setup for the room store.

:func:`open_db` hands back a ready connection: the file (and its directory)
exist, WAL mode is on where SQLite supports it, and the ``rooms`` table with
its indexes is in place.  The DDL only uses ``IF NOT EXISTS``, so reopening
an existing database leaves its rows alone.

The API opens one connection in its lifespan handler and shares it with the
repository; the connection is closed when the app shuts down.

Example::

    from eldercare.storage.database import open_db

    conn = await open_db("data/eldercare.db")
    repo = RoomRepository(conn)
    ...
    await conn.close()
"""

from __future__ import annotations

import logging
from pathlib import Path

import aiosqlite

from eldercare.core.exceptions import StoreError
from eldercare.core.query import FOLD_FUNCTION
from eldercare.core.settings import DEFAULT_DATABASE_PATH

__all__ = [
    "DEFAULT_DB_PATH",
    "MEMORY_DB",
    "open_db",
    "create_schema",
]

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

#: Fallback database path when no explicit path is passed to :func:`open_db`.
DEFAULT_DB_PATH: Path = Path(DEFAULT_DATABASE_PATH)

#: Special path that opens a private in-memory database.
MEMORY_DB: str = ":memory:"

# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

#: ``rooms`` is the document store for room listings.
#:
#: Column notes
#: ------------
#: id                 24-char hex room id (PRIMARY KEY).
#: document           Full room serialised as camelCase JSON.  The source of
#:                    truth when a room is read back.
#: name .. community_rating
#:                    Copies of the document fields the listing filters and
#:                    the sort order need, so queries never parse JSON.
#:                    Written together with ``document`` in the same
#:                    statement.
#: is_active          Boolean (0/1) soft-delete marker.
#: created_at / updated_at
#:                    ISO-8601 UTC timestamps set by the repository.
_DDL_ROOMS = """\
CREATE TABLE IF NOT EXISTS rooms (
    id                TEXT     NOT NULL,
    name              TEXT     NOT NULL,
    facility_name     TEXT     NOT NULL,
    description       TEXT     NOT NULL DEFAULT '',
    city              TEXT     NOT NULL,
    area              TEXT     NOT NULL,
    room_type         TEXT     NOT NULL,
    rent              REAL     NOT NULL,
    lifestyle_rating  REAL     NOT NULL,
    medical_rating    REAL     NOT NULL,
    services_rating   REAL     NOT NULL,
    community_rating  REAL     NOT NULL,
    is_active         INTEGER  NOT NULL DEFAULT 1,
    document          TEXT     NOT NULL,
    created_at        TEXT     NOT NULL,
    updated_at        TEXT     NOT NULL,
    PRIMARY KEY (id)
)"""

_DDL_INDEXES: tuple[str, ...] = (
    "CREATE INDEX IF NOT EXISTS ix_rooms_city ON rooms (city)",
    "CREATE INDEX IF NOT EXISTS ix_rooms_area ON rooms (area)",
    "CREATE INDEX IF NOT EXISTS ix_rooms_room_type ON rooms (room_type)",
    "CREATE INDEX IF NOT EXISTS ix_rooms_rent ON rooms (rent)",
    "CREATE INDEX IF NOT EXISTS ix_rooms_active_order"
    " ON rooms (is_active, lifestyle_rating DESC, rent ASC)",
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def open_db(path: Path | str | None = None) -> aiosqlite.Connection:
    """Connect to the room database, creating file and schema when missing.

    Rows come back as :class:`aiosqlite.Row`, so repository code reads
    columns by name.  The connection also gets the ``casefold()`` SQL
    function the text filters of :class:`~eldercare.core.query.RoomQuery`
    call.

    Args:
        path: SQLite file, or ``":memory:"`` for a private throwaway store.
            :data:`DEFAULT_DB_PATH` when omitted.

    Returns:
        The open connection.  Closing it is up to the caller.

    Raises:
        :exc:`~eldercare.core.exceptions.StoreError`: The directory, the file
            or the schema could not be created.
    """
    if path is None:
        path = DEFAULT_DB_PATH
    target: str | Path
    if str(path) == MEMORY_DB:
        target = MEMORY_DB
    else:
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"Cannot create database directory {target.parent}: {exc}") from exc

    logger.debug("Opening SQLite database at %s", target)

    try:
        conn: aiosqlite.Connection = await aiosqlite.connect(target)
    except (aiosqlite.Error, OSError) as exc:
        raise StoreError(f"Cannot open database {target}: {exc}") from exc
    conn.row_factory = aiosqlite.Row

    try:
        await conn.create_function(FOLD_FUNCTION, 1, _casefold, deterministic=True)
        await _configure_pragmas(conn)
        await create_schema(conn)
    except aiosqlite.Error as exc:
        await conn.close()
        raise StoreError(f"Cannot initialise database {target}: {exc}") from exc

    logger.info("SQLite database ready at %s (schema verified)", target)
    return conn


async def create_schema(conn: aiosqlite.Connection) -> None:
    """Create the ``rooms`` table and its indexes unless they already exist."""
    await conn.execute(_DDL_ROOMS)
    for ddl in _DDL_INDEXES:
        await conn.execute(ddl)
    await conn.commit()
    logger.debug("Schema bootstrap complete (rooms table verified)")


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


async def _configure_pragmas(conn: aiosqlite.Connection) -> None:
    """Apply PRAGMA settings that must be set immediately after opening."""
    result = await conn.execute("PRAGMA journal_mode=WAL")
    row = await result.fetchone()
    mode = row[0] if row else "unknown"
    if mode != "wal":
        logger.debug("SQLite journal_mode is %r (expected for in-memory databases)", mode)
    else:
        logger.debug("SQLite journal_mode set to WAL")

    await conn.execute("PRAGMA foreign_keys=ON")


def _casefold(value: object) -> str | None:
    """SQL ``casefold(x)``: Unicode-aware case folding for text filters."""
    if value is None:
        return None
    return str(value).casefold()
