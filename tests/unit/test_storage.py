"""Unit tests for the storage layer.

Covers:
- :func:`~eldercare.storage.database.open_db` schema bootstrap.
- :class:`~eldercare.storage.repository.RoomRepository` reads: filtered,
  ordered, paginated listing; lookup by id; statistics.
- Repository writes: insert, bulk insert, replace, update, deactivate, delete.
- :func:`~eldercare.storage.sample_data.seed_rooms`.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import aiosqlite
import pytest

from eldercare.core.exceptions import InvalidIdError, StoreError, ValidationError
from eldercare.core.models import Room, RoomDraft
from eldercare.core.query import MAX_LIMIT, MAX_PAGE, RoomQuery
from eldercare.core.ratings import overall_rating
from eldercare.core.settings import Settings
from eldercare.storage.database import DEFAULT_DB_PATH, open_db
from eldercare.storage.repository import RoomPage, RoomRepository
from eldercare.storage.sample_data import SAMPLE_ROOMS, seed_rooms

logger = logging.getLogger(__name__)

_UNKNOWN_ID = "0" * 24


# ---------------------------------------------------------------------------
# Factories / helpers
# ---------------------------------------------------------------------------


def _make_draft(
    *,
    name: str = "Test Room",
    city: str = "Pune",
    area: str = "Baner",
    rent: float = 50000,
    ratings: tuple[float, float, float, float] = (5, 5, 5, 5),
    room_type: str = "assisted_living",
    description: str = "A quiet room.",
    is_active: bool = True,
) -> RoomDraft:
    """Return a valid :class:`RoomDraft` with overridable defaults."""
    doc: dict[str, Any] = {**SAMPLE_ROOMS[0]}
    doc.update(
        name=name,
        facilityName=f"{name} Facility",
        description=description,
        roomType=room_type,
        isActive=is_active,
        location={"city": city, "area": area, "address": f"{area}, {city}"},
        pricing={**doc["pricing"], "rent": rent},
    )
    for key, value in zip(("lifestyle", "medical", "services", "community"), ratings):
        doc[key] = {**doc[key], "rating": value}
    return RoomDraft.model_validate(doc)


def _names(page: RoomPage) -> list[str]:
    return [room.name for room in page.items]


# ===========================================================================
# Database bootstrap
# ===========================================================================


class TestOpenDb:
    async def test_creates_file_and_parent_dirs(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "rooms.db"
        conn = await open_db(target)
        try:
            cursor = await conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name='rooms'"
            )
            assert await cursor.fetchone() is not None
        finally:
            await conn.close()
        assert target.exists()

    async def test_schema_is_idempotent(self, tmp_path: Path) -> None:
        target = tmp_path / "rooms.db"
        for _ in range(2):
            conn = await open_db(target)
            await conn.close()

    async def test_driver_errors_become_store_errors(self, db_conn: aiosqlite.Connection) -> None:
        repo = RoomRepository(db_conn)
        await db_conn.execute("DROP TABLE rooms")
        with pytest.raises(StoreError, match="Error finding rooms"):
            await repo.find_all(RoomQuery())

    def test_default_path_matches_settings(self, clean_env: None) -> None:
        assert DEFAULT_DB_PATH == Path(Settings().database_path)


# ===========================================================================
# find_all
# ===========================================================================


class TestFindAll:
    async def test_sample_order(self, repository: RoomRepository, seeded: dict[str, Room]) -> None:
        page = await repository.find_all(RoomQuery())
        assert [r.facility_name for r in page.items] == [
            "NEMA Eldercare",
            "Aurum Senior Living",
            "Artha Senior Care",
        ]
        assert page.total == 3
        assert page.pages == 1

    async def test_rent_breaks_lifestyle_ties(self, repository: RoomRepository) -> None:
        await repository.bulk_insert(
            [
                _make_draft(name="Pricey", rent=90000, ratings=(7, 5, 5, 5)),
                _make_draft(name="Cheap", rent=40000, ratings=(7, 5, 5, 5)),
                _make_draft(name="Top", rent=99000, ratings=(9, 5, 5, 5)),
            ]
        )
        page = await repository.find_all(RoomQuery())
        assert _names(page) == ["Top", "Cheap", "Pricey"]

    async def test_pages_partition_matches(self, repository: RoomRepository) -> None:
        await repository.bulk_insert(
            [_make_draft(name=f"Room {i}", rent=50000, ratings=(6, 6, 6, 6)) for i in range(7)]
        )
        full = await repository.find_all(RoomQuery(limit=100))
        seen: list[str] = []
        for page_no in (1, 2, 3):
            page = await repository.find_all(RoomQuery(page=page_no, limit=3))
            assert page.total == 7
            assert page.pages == 3
            seen.extend(room.id for room in page.items)
        assert seen == [room.id for room in full.items]
        assert len(set(seen)) == 7

    async def test_page_past_end_is_empty(
        self, repository: RoomRepository, seeded: dict[str, Room]
    ) -> None:
        page = await repository.find_all(RoomQuery(page=5, limit=10))
        assert page.items == []
        assert page.total == 3

    async def test_city_filter_is_case_insensitive_substring(
        self, repository: RoomRepository, seeded: dict[str, Room]
    ) -> None:
        await repository.insert(_make_draft(name="Pune Room", city="Pune"))
        page = await repository.find_all(RoomQuery(city="guru"))
        assert page.total == 3
        assert all(r.location.city == "Gurugram" for r in page.items)

    async def test_city_filter_folds_non_ascii_text(self, repository: RoomRepository) -> None:
        room = await repository.insert(_make_draft(name="Nordic Room", city="Örebro"))
        for needle in ("Örebro", "örebro", "ÖREBRO", "rebro"):
            page = await repository.find_all(RoomQuery(city=needle))
            assert [r.id for r in page.items] == [room.id], needle

    async def test_search_folds_non_ascii_text(self, repository: RoomRepository) -> None:
        room = await repository.insert(_make_draft(name="Haus an der Straße"))
        await repository.insert(_make_draft(name="Other"))
        for needle in ("STRASSE", "straße", "Haus An Der"):
            page = await repository.find_all(RoomQuery(search=needle))
            assert [r.id for r in page.items] == [room.id], needle

    async def test_last_allowed_page_is_empty(
        self, repository: RoomRepository, seeded: dict[str, Room]
    ) -> None:
        page = await repository.find_all(RoomQuery(page=MAX_PAGE, limit=MAX_LIMIT))
        assert page.items == []
        assert page.total == 3

    async def test_area_filter(self, repository: RoomRepository, seeded: dict[str, Room]) -> None:
        page = await repository.find_all(RoomQuery(area="sector 54"))
        assert [r.facility_name for r in page.items] == ["Aurum Senior Living"]

    async def test_room_type_filter(
        self, repository: RoomRepository, seeded: dict[str, Room]
    ) -> None:
        page = await repository.find_all(RoomQuery.from_params({"roomType": "independent_living"}))
        assert [r.facility_name for r in page.items] == ["NEMA Eldercare"]

    async def test_rent_bounds_inclusive(
        self, repository: RoomRepository, seeded: dict[str, Room]
    ) -> None:
        page = await repository.find_all(RoomQuery(min_rent=70000, max_rent=70000))
        assert page.total == 2
        assert all(r.pricing.rent == 70000 for r in page.items)

    async def test_min_rating_matches_any_category(self, repository: RoomRepository) -> None:
        await repository.bulk_insert(
            [
                _make_draft(name="One strong", ratings=(3, 3, 3, 9)),
                _make_draft(name="All weak", ratings=(7, 7, 7, 7)),
            ]
        )
        page = await repository.find_all(RoomQuery(min_rating=8))
        assert _names(page) == ["One strong"]
        assert overall_rating(page.items[0]) < 8

    async def test_search_matches_any_text_field(self, repository: RoomRepository) -> None:
        await repository.bulk_insert(
            [
                _make_draft(name="Lotus Home"),
                _make_draft(name="Other", description="Near the LOTUS temple."),
                _make_draft(name="Third", area="Lotus Nagar"),
                _make_draft(name="Unrelated"),
            ]
        )
        page = await repository.find_all(RoomQuery(search="lotus"))
        assert sorted(_names(page)) == ["Lotus Home", "Other", "Third"]

    async def test_search_and_min_rating_both_apply(self, repository: RoomRepository) -> None:
        await repository.bulk_insert(
            [
                _make_draft(name="Lotus High", ratings=(9, 5, 5, 5)),
                _make_draft(name="Lotus Low", ratings=(5, 5, 5, 5)),
                _make_draft(name="Rose High", ratings=(9, 5, 5, 5)),
            ]
        )
        page = await repository.find_all(RoomQuery(search="lotus", min_rating=8))
        assert _names(page) == ["Lotus High"]

    async def test_inactive_rooms_never_listed(self, repository: RoomRepository) -> None:
        await repository.bulk_insert(
            [_make_draft(name="Open"), _make_draft(name="Closed", is_active=False)]
        )
        page = await repository.find_all(RoomQuery())
        assert _names(page) == ["Open"]
        assert page.total == 1

    async def test_every_item_satisfies_filters(
        self, repository: RoomRepository, seeded: dict[str, Room]
    ) -> None:
        query = RoomQuery(city="gurugram", max_rent=80000, min_rating=9)
        page = await repository.find_all(query)
        # Artha passes on its medical rating of 9.
        assert [r.facility_name for r in page.items] == [
            "Aurum Senior Living",
            "Artha Senior Care",
        ]
        for room in page.items:
            assert "gurugram" in room.location.city.lower()
            assert room.pricing.rent <= 80000
            assert max(room.ratings()) >= 9


# ===========================================================================
# find_by_id
# ===========================================================================


class TestFindById:
    async def test_found(self, repository: RoomRepository, seeded: dict[str, Room]) -> None:
        artha = seeded["Artha Senior Care"]
        room = await repository.find_by_id(artha.id)
        assert room == artha

    async def test_unknown_id_returns_none(
        self, repository: RoomRepository, seeded: dict[str, Room]
    ) -> None:
        assert await repository.find_by_id(_UNKNOWN_ID) is None

    async def test_malformed_id_raises(self, repository: RoomRepository) -> None:
        with pytest.raises(InvalidIdError):
            await repository.find_by_id("abc")

    async def test_inactive_room_still_found(self, repository: RoomRepository) -> None:
        room = await repository.insert(_make_draft(is_active=False))
        found = await repository.find_by_id(room.id)
        assert found is not None
        assert found.is_active is False


# ===========================================================================
# get_statistics
# ===========================================================================


class TestStatistics:
    async def test_sample_statistics(
        self, repository: RoomRepository, seeded: dict[str, Room]
    ) -> None:
        stats = await repository.get_statistics()
        assert stats.total_rooms == 3
        assert stats.average_rent == pytest.approx(80000)
        assert stats.top_rated_rooms == 3

    async def test_empty_store(self, repository: RoomRepository) -> None:
        stats = await repository.get_statistics()
        assert stats.total_rooms == 0
        assert stats.average_rent == 0
        assert stats.top_rated_rooms == 0

    async def test_ignores_inactive_and_counts_any_high_rating(
        self, repository: RoomRepository
    ) -> None:
        await repository.bulk_insert(
            [
                _make_draft(rent=10000, ratings=(3, 3, 8, 3)),
                _make_draft(rent=30000, ratings=(7, 7, 7, 7)),
                _make_draft(rent=99999, ratings=(10, 10, 10, 10), is_active=False),
            ]
        )
        stats = await repository.get_statistics()
        assert stats.total_rooms == 2
        assert stats.average_rent == pytest.approx(20000)
        assert stats.top_rated_rooms == 1


# ===========================================================================
# Writes
# ===========================================================================


class TestWrites:
    async def test_insert_assigns_identity(self, repository: RoomRepository) -> None:
        room = await repository.insert(_make_draft())
        assert len(room.id) == 24
        assert room.created_at == room.updated_at
        assert await repository.find_by_id(room.id) == room

    async def test_bulk_insert_empty(self, repository: RoomRepository) -> None:
        assert await repository.bulk_insert([]) == []

    async def test_replace_all_discards_previous_rooms(self, repository: RoomRepository) -> None:
        old = await repository.insert(_make_draft(name="Old"))
        new = await repository.replace_all([_make_draft(name="New")])
        assert await repository.find_by_id(old.id) is None
        page = await repository.find_all(RoomQuery())
        assert _names(page) == ["New"]
        assert page.items[0].id == new[0].id

    async def test_update_changes_fields_and_timestamp(self, repository: RoomRepository) -> None:
        room = await repository.insert(_make_draft(rent=50000))
        updated = await repository.update(
            room.id, {"pricing": {**room.pricing.model_dump(), "rent": 65000}}
        )
        assert updated is not None
        assert updated.pricing.rent == 65000
        assert updated.created_at == room.created_at
        assert updated.updated_at >= room.updated_at
        page = await repository.find_all(RoomQuery(min_rent=60000))
        assert [r.id for r in page.items] == [room.id]

    async def test_overall_rating_follows_updates(self, repository: RoomRepository) -> None:
        room = await repository.insert(_make_draft(ratings=(8, 9, 8, 8)))
        assert overall_rating(room) == 8.3
        await repository.update(room.id, {"medical": {"rating": 5}})
        reloaded = await repository.find_by_id(room.id)
        assert reloaded is not None
        assert overall_rating(reloaded) == 7.3

    async def test_update_accepts_camel_case_keys(self, repository: RoomRepository) -> None:
        room = await repository.insert(_make_draft())
        updated = await repository.update(room.id, {"facilityName": "Renamed"})
        assert updated is not None
        assert updated.facility_name == "Renamed"

    async def test_update_unknown_room(self, repository: RoomRepository) -> None:
        assert await repository.update(_UNKNOWN_ID, {"name": "x"}) is None

    async def test_update_rejects_store_owned_fields(self, repository: RoomRepository) -> None:
        room = await repository.insert(_make_draft())
        with pytest.raises(ValidationError) as exc_info:
            await repository.update(room.id, {"id": "1" * 24})
        assert exc_info.value.errors[0].field == "id"

    async def test_update_rejects_unknown_field(self, repository: RoomRepository) -> None:
        room = await repository.insert(_make_draft())
        with pytest.raises(ValidationError):
            await repository.update(room.id, {"colour": "blue"})

    async def test_update_rejects_invalid_value(self, repository: RoomRepository) -> None:
        room = await repository.insert(_make_draft())
        with pytest.raises(ValidationError):
            await repository.update(room.id, {"lifestyle": {"rating": 11}})

    async def test_deactivate_hides_from_listing(
        self, repository: RoomRepository, seeded: dict[str, Room]
    ) -> None:
        nema = seeded["NEMA Eldercare"]
        assert await repository.deactivate(nema.id) is True
        page = await repository.find_all(RoomQuery())
        assert nema.id not in {r.id for r in page.items}
        stats = await repository.get_statistics()
        assert stats.total_rooms == 2

    async def test_deactivate_unknown(self, repository: RoomRepository) -> None:
        assert await repository.deactivate(_UNKNOWN_ID) is False

    async def test_delete(self, repository: RoomRepository) -> None:
        room = await repository.insert(_make_draft())
        assert await repository.delete(room.id) is True
        assert await repository.delete(room.id) is False
        assert await repository.find_by_id(room.id) is None

    async def test_concurrent_updates_both_land(self, repository: RoomRepository) -> None:
        room = await repository.insert(_make_draft())
        await asyncio.gather(
            repository.update(room.id, {"name": "Renamed"}),
            repository.update(room.id, {"description": "Sunny corner room."}),
        )
        reloaded = await repository.find_by_id(room.id)
        assert reloaded is not None
        assert reloaded.name == "Renamed"
        assert reloaded.description == "Sunny corner room."

    async def test_failed_update_leaves_room_unchanged(
        self, repository: RoomRepository
    ) -> None:
        room = await repository.insert(_make_draft())
        with pytest.raises(ValidationError):
            await repository.update(room.id, {"name": "Renamed", "lifestyle": {"rating": 11}})
        assert await repository.find_by_id(room.id) == room
        # The connection is usable again after the rollback.
        updated = await repository.update(room.id, {"name": "Renamed"})
        assert updated is not None
        assert updated.name == "Renamed"

    async def test_insert_driver_error_rolls_back(
        self, repository: RoomRepository, db_conn: aiosqlite.Connection
    ) -> None:
        await db_conn.execute("DROP TABLE rooms")
        await db_conn.commit()
        with pytest.raises(StoreError, match="Error inserting room"):
            await repository.insert(_make_draft())
        assert not db_conn.in_transaction


# ===========================================================================
# Seeding
# ===========================================================================


class TestSeedRooms:
    async def test_seed_is_repeatable(self, repository: RoomRepository) -> None:
        first = await seed_rooms(repository)
        second = await seed_rooms(repository)
        assert len(first) == len(second) == 3
        page = await repository.find_all(RoomQuery())
        assert page.total == 3
        assert {r.id for r in page.items} == {r.id for r in second}

    async def test_seeded_room_keeps_all_fields(
        self, repository: RoomRepository, seeded: dict[str, Room]
    ) -> None:
        artha = await repository.find_by_id(seeded["Artha Senior Care"].id)
        assert artha is not None
        assert artha.pricing.admission_charge == 20000
        assert len(artha.images) == 3
        assert "Wheelchair friendly" in artha.facilities.accessibility
        assert artha.contact_info.website == "https://arthaseniorcare.com"
