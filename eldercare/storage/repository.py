"""Room repository: the query engine and write paths over the ``rooms`` table.

Provides :class:`RoomRepository`, the single data-access object for rooms.
Every read the public API performs (filtered listing, statistics, lookup by
id, lookup for comparison) and every administrative write goes through it.

Each room is stored as a camelCase JSON document plus a handful of copied
columns (city, rent, the four ratings, …) that the filters and the sort order
run against.  Both are written by the same statement, so they never disagree.

All driver errors are re-raised as
:exc:`~eldercare.core.exceptions.StoreError`; no call is retried.

Typical usage::

    from eldercare.core.query import RoomQuery
    from eldercare.storage.database import open_db
    from eldercare.storage.repository import RoomRepository

    async def run() -> None:
        conn = await open_db()
        repo = RoomRepository(conn)

        page = await repo.find_all(RoomQuery(city="gurugram", min_rating=8))
        stats = await repo.get_statistics()
        await conn.close()
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import AsyncIterator, Iterable, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import aiosqlite
import pydantic

from eldercare.core.exceptions import FieldError, StoreError, ValidationError
from eldercare.core.ids import is_valid_room_id, new_room_id, validate_room_id
from eldercare.core.models import Room, RoomDraft
from eldercare.core.query import ORDER_BY, RATING_COLUMNS, RoomQuery
from eldercare.core.ratings import TOP_RATED_THRESHOLD

__all__ = [
    "RoomPage",
    "RoomStatistics",
    "RoomRepository",
]

logger = logging.getLogger(__name__)

_INSERT_SQL = """
    INSERT INTO rooms
        (id, name, facility_name, description, city, area, room_type, rent,
         lifestyle_rating, medical_rating, services_rating, community_rating,
         is_active, document, created_at, updated_at)
    VALUES
        (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

_UPDATE_SQL = """
    UPDATE rooms SET
        name = ?, facility_name = ?, description = ?, city = ?, area = ?,
        room_type = ?, rent = ?, lifestyle_rating = ?, medical_rating = ?,
        services_rating = ?, community_rating = ?, is_active = ?, document = ?,
        updated_at = ?
    WHERE id = ?
"""

#: Fields the store owns; an update may not change them.
_IMMUTABLE_FIELDS = frozenset({"id", "created_at", "updated_at"})


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RoomPage:
    """One page of a filtered room listing.

    Attributes:
        items: Rooms on this page, in listing order.
        total: Number of rooms matching the filters across all pages.
        page: 1-based page number that was requested.
        limit: Page size that was requested.
    """

    items: list[Room]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        """Number of pages needed to show every match."""
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass(frozen=True)
class RoomStatistics:
    """Aggregate figures over all active rooms.

    Attributes:
        total_rooms: Count of active rooms.
        average_rent: Mean rent of active rooms; ``0`` when there are none.
        top_rated_rooms: Active rooms with at least one sub-rating ≥ 8.
    """

    total_rooms: int
    average_rent: float
    top_rated_rooms: int


# ---------------------------------------------------------------------------
# Row mapping
# ---------------------------------------------------------------------------


def _room_columns(room: Room) -> tuple[Any, ...]:
    """Column values shared by INSERT and UPDATE, in ``_UPDATE_SQL`` order."""
    return (
        room.name,
        room.facility_name,
        room.description,
        room.location.city,
        room.location.area,
        str(room.room_type),
        room.pricing.rent,
        room.lifestyle.rating,
        room.medical.rating,
        room.services.rating,
        room.community.rating,
        1 if room.is_active else 0,
        room.model_dump_json(by_alias=True),
    )


def _insert_row(room: Room) -> tuple[Any, ...]:
    columns = _room_columns(room)
    return (
        room.id,
        *columns,
        room.created_at.isoformat(),
        room.updated_at.isoformat(),
    )


def _room_from_row(row: aiosqlite.Row) -> Room:
    return Room.model_validate_json(row["document"])


def _resolve_field(key: str) -> str:
    """Map a camelCase or snake_case key to the :class:`Room` attribute name."""
    if key in Room.model_fields:
        return key
    for name, info in Room.model_fields.items():
        if info.alias == key:
            return name
    raise ValidationError([FieldError(key, "unknown field")], "Invalid room update")


def _merge_changes(current: Room, resolved: Mapping[str, Any]) -> Room:
    """Apply *resolved* field changes to *current* and re-validate."""
    forbidden = sorted(_IMMUTABLE_FIELDS.intersection(resolved))
    if forbidden:
        raise ValidationError(
            [FieldError(name, "is managed by the store") for name in forbidden],
            "Invalid room update",
        )

    merged = {**current.model_dump(), **resolved, "updated_at": datetime.now(UTC)}
    try:
        return Room.model_validate(merged)
    except pydantic.ValidationError as exc:
        raise ValidationError(
            [FieldError(".".join(str(p) for p in err["loc"]), err["msg"]) for err in exc.errors()],
            "Invalid room update",
        ) from exc


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class RoomRepository:
    """Data-access object for the ``rooms`` table.

    It owns no connection lifecycle; the caller must supply an open
    :class:`aiosqlite.Connection` and close it when done (see
    :func:`~eldercare.storage.database.open_db`).

    Reads (:meth:`find_all`, :meth:`find_by_id`, :meth:`find_for_comparison`,
    :meth:`get_statistics`) have no side effects.  Every write runs in its
    own ``BEGIN IMMEDIATE`` transaction and rolls back on failure.

    Args:
        conn: Open, configured :class:`aiosqlite.Connection`.
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn
        self._write_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    async def find_by_id(self, room_id: str) -> Room | None:
        """Return the room with *room_id*, active or not.

        Args:
            room_id: 24-char hex room id.

        Returns:
            The room, or ``None`` if no room has this id.

        Raises:
            :exc:`~eldercare.core.exceptions.InvalidIdError`: If *room_id* is
                malformed.
            :exc:`~eldercare.core.exceptions.StoreError`: On database failure.
        """
        validate_room_id(room_id)
        try:
            cursor = await self._conn.execute(
                "SELECT document FROM rooms WHERE id = ? LIMIT 1",
                (room_id,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise StoreError(f"Error finding room by ID {room_id}: {exc}") from exc
        return _room_from_row(row) if row is not None else None

    async def find_all(self, query: RoomQuery) -> RoomPage:
        """Return one page of active rooms matching *query*.

        Ordering is lifestyle rating descending, rent ascending, then id.

        Args:
            query: Filters and pagination.

        Returns:
            A :class:`RoomPage` with the page items and the total match count.

        Raises:
            :exc:`~eldercare.core.exceptions.StoreError`: On database failure.
        """
        where, params = query.to_where_clause()
        try:
            cursor = await self._conn.execute(
                f"SELECT COUNT(*) FROM rooms WHERE {where}",
                params,
            )
            count_row = await cursor.fetchone()
            cursor = await self._conn.execute(
                f"SELECT document FROM rooms WHERE {where} ORDER BY {ORDER_BY} LIMIT ? OFFSET ?",
                [*params, query.limit, query.offset],
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise StoreError(f"Error finding rooms: {exc}") from exc

        total = int(count_row[0]) if count_row is not None else 0
        items = [_room_from_row(row) for row in rows]
        logger.debug(
            "find_all: page=%d limit=%d returned=%d total=%d",
            query.page,
            query.limit,
            len(items),
            total,
        )
        return RoomPage(items=items, total=total, page=query.page, limit=query.limit)

    async def find_for_comparison(self, room_ids: Iterable[str]) -> list[Room]:
        """Return the distinct active rooms among *room_ids*, in listing order.

        Malformed, unknown, inactive and repeated ids are dropped without
        error; the caller decides whether enough rooms resolved.

        Raises:
            :exc:`~eldercare.core.exceptions.StoreError`: On database failure.
        """
        wanted = list(dict.fromkeys(rid for rid in room_ids if is_valid_room_id(rid)))
        if not wanted:
            return []

        placeholders = ",".join("?" * len(wanted))
        try:
            cursor = await self._conn.execute(
                f"SELECT document FROM rooms WHERE is_active = 1 AND id IN ({placeholders}) "
                f"ORDER BY {ORDER_BY}",
                wanted,
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise StoreError(f"Error finding rooms for comparison: {exc}") from exc
        return [_room_from_row(row) for row in rows]

    async def get_statistics(self) -> RoomStatistics:
        """Count, average rent and top-rated count over active rooms.

        Raises:
            :exc:`~eldercare.core.exceptions.StoreError`: On database failure.
        """
        top_rated = " OR ".join(f"{col} >= ?" for col in RATING_COLUMNS)
        try:
            cursor = await self._conn.execute(
                f"""
                SELECT
                    COUNT(*),
                    AVG(rent),
                    SUM(CASE WHEN ({top_rated}) THEN 1 ELSE 0 END)
                FROM rooms
                WHERE is_active = 1
                """,
                [TOP_RATED_THRESHOLD] * len(RATING_COLUMNS),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise StoreError(f"Error getting room statistics: {exc}") from exc

        if row is None:
            return RoomStatistics(total_rooms=0, average_rent=0, top_rated_rooms=0)
        return RoomStatistics(
            total_rooms=int(row[0] or 0),
            average_rent=float(row[1]) if row[1] is not None else 0,
            top_rated_rooms=int(row[2] or 0),
        )

    # ------------------------------------------------------------------
    # Write helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _materialise(draft: RoomDraft, now: datetime) -> Room:
        """Give *draft* a fresh id and timestamps."""
        return Room.model_validate(
            {
                **draft.model_dump(),
                "id": new_room_id(),
                "created_at": now,
                "updated_at": now,
            }
        )

    @asynccontextmanager
    async def _transaction(self, action: str) -> AsyncIterator[None]:
        """Run the enclosed statements as one ``BEGIN IMMEDIATE`` transaction.

        Writers on this repository are serialised by a lock, and
        ``IMMEDIATE`` takes SQLite's write lock up front, so a
        read-modify-write inside the block cannot interleave with another
        writer.  Any error rolls the transaction back; driver errors are
        re-raised as :exc:`~eldercare.core.exceptions.StoreError`.
        """
        async with self._write_lock:
            try:
                await self._conn.execute("BEGIN IMMEDIATE")
            except aiosqlite.Error as exc:
                raise StoreError(f"Error {action}: {exc}") from exc
            try:
                yield
                await self._conn.commit()
            except aiosqlite.Error as exc:
                await self._conn.rollback()
                raise StoreError(f"Error {action}: {exc}") from exc
            except BaseException:
                await self._conn.rollback()
                raise

    async def insert(self, draft: RoomDraft) -> Room:
        """Store a new room and return it with its id and timestamps.

        Raises:
            :exc:`~eldercare.core.exceptions.StoreError`: On database failure.
        """
        room = self._materialise(draft, datetime.now(UTC))
        async with self._transaction(f"inserting room {room.name!r}"):
            await self._conn.execute(_INSERT_SQL, _insert_row(room))

        logger.debug("Inserted room %s (%s)", room.id, room.name)
        return room

    async def bulk_insert(self, drafts: Sequence[RoomDraft]) -> list[Room]:
        """Store several rooms in one ``executemany`` call.

        Returns:
            The stored rooms, in the order of *drafts*.

        Raises:
            :exc:`~eldercare.core.exceptions.StoreError`: On database failure.
        """
        if not drafts:
            return []
        now = datetime.now(UTC)
        rooms = [self._materialise(draft, now) for draft in drafts]
        async with self._transaction(f"bulk-inserting {len(rooms)} rooms"):
            await self._conn.executemany(_INSERT_SQL, [_insert_row(room) for room in rooms])

        logger.debug("bulk_insert: %d rooms stored", len(rooms))
        return rooms

    async def replace_all(self, drafts: Sequence[RoomDraft]) -> list[Room]:
        """Delete every room, then store *drafts*, in a single transaction.

        Either the whole collection is replaced or nothing changes.

        Raises:
            :exc:`~eldercare.core.exceptions.StoreError`: On database failure.
        """
        now = datetime.now(UTC)
        rooms = [self._materialise(draft, now) for draft in drafts]
        async with self._transaction("replacing rooms"):
            cursor = await self._conn.execute("DELETE FROM rooms")
            removed = cursor.rowcount
            if rooms:
                await self._conn.executemany(_INSERT_SQL, [_insert_row(room) for room in rooms])

        logger.info("replace_all: removed %d rooms, stored %d", removed, len(rooms))
        return rooms

    async def update(self, room_id: str, changes: Mapping[str, Any]) -> Room | None:
        """Replace top-level fields of a room and bump ``updated_at``.

        Keys may be camelCase or snake_case.  Nested records are replaced
        wholesale (``{"lifestyle": {"rating": 6}}`` drops the amenities).  The
        merged room is re-validated, so every model invariant still holds.

        The read, the merge and the write run in one transaction, so two
        concurrent updates of the same room both land.

        Args:
            room_id: Room to change.
            changes: Field name → new value.

        Returns:
            The updated room, or ``None`` if no room has this id.

        Raises:
            :exc:`~eldercare.core.exceptions.InvalidIdError`: Malformed id.
            :exc:`~eldercare.core.exceptions.ValidationError`: Unknown or
                store-owned field, or the merged room is invalid.
            :exc:`~eldercare.core.exceptions.StoreError`: On database failure.
        """
        validate_room_id(room_id)
        async with self._transaction(f"updating room {room_id}"):
            cursor = await self._conn.execute(
                "SELECT document FROM rooms WHERE id = ? LIMIT 1",
                (room_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None

            resolved = {_resolve_field(key): value for key, value in changes.items()}
            room = _merge_changes(_room_from_row(row), resolved)
            await self._conn.execute(
                _UPDATE_SQL,
                (*_room_columns(room), room.updated_at.isoformat(), room.id),
            )

        logger.debug("Updated room %s (%s)", room_id, ", ".join(sorted(resolved)))
        return room

    async def deactivate(self, room_id: str) -> bool:
        """Soft-delete a room.  Returns ``False`` if no room has this id."""
        room = await self.update(room_id, {"is_active": False})
        if room is not None:
            logger.info("Deactivated room %s", room_id)
        return room is not None

    async def delete(self, room_id: str) -> bool:
        """Hard-delete a room.  Returns ``False`` if no room has this id."""
        validate_room_id(room_id)
        async with self._transaction(f"deleting room {room_id}"):
            cursor = await self._conn.execute("DELETE FROM rooms WHERE id = ?", (room_id,))
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Deleted room %s", room_id)
        return deleted
