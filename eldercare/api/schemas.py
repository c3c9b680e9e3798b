"""API request and response schemas.

Every response body is an envelope::

    {"success": true, "message": "...", "data": {...}}
    {"success": false, "message": "...", "errors": [{"field": ..., "message": ...}]}

Response models are built from domain objects by their ``from_*``
constructors.  Derived figures (``overallRating``, ``totalCost``) are
computed there, at shaping time, from :mod:`eldercare.core.ratings`.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import Field

from eldercare.core.models import (
    CamelModel,
    CareLevel,
    CommunityRating,
    Facilities,
    LifestyleRating,
    Location,
    MedicalRating,
    Occupancy,
    Pricing,
    Room,
    RoomType,
    ServicesRating,
)
from eldercare.core.ratings import overall_rating, total_cost
from eldercare.services.comparison import Comparison, RatingEntry
from eldercare.storage.repository import RoomPage, RoomStatistics

T = TypeVar("T")

#: List responses show at most this many images per room.
LIST_IMAGE_LIMIT = 3


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class ApiResponse(CamelModel, Generic[T]):
    """Successful response envelope."""

    success: bool = True
    message: str | None = None
    data: T | None = None


class FieldErrorItem(CamelModel):
    field: str
    message: str


class ErrorResponse(CamelModel):
    """Failure envelope.  ``errors`` is present for validation failures only."""

    success: bool = False
    message: str
    errors: list[FieldErrorItem] | None = None


class HealthResponse(CamelModel):
    status: str = "OK"
    message: str = "ElderCare API is running"


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CompareRequest(CamelModel):
    """Body of ``POST /api/rooms/compare``.  Size is checked by the handler."""

    room_ids: list[str] = Field(description="Ids of the rooms to compare (2–5).")


# ---------------------------------------------------------------------------
# Rooms
# ---------------------------------------------------------------------------


class RoomListItem(CamelModel):
    """Room as shown in a listing: no facility details, first images only."""

    id: str
    name: str
    facility_name: str
    location: Location
    pricing: Pricing
    room_type: RoomType
    occupancy: Occupancy
    care_level: CareLevel
    lifestyle: LifestyleRating
    medical: MedicalRating
    services: ServicesRating
    community: CommunityRating
    overall_rating: float
    images: list[str]

    @classmethod
    def from_room(cls, room: Room) -> RoomListItem:
        return cls(
            id=room.id,
            name=room.name,
            facility_name=room.facility_name,
            location=room.location,
            pricing=room.pricing,
            room_type=room.room_type,
            occupancy=room.occupancy,
            care_level=room.care_level,
            lifestyle=room.lifestyle,
            medical=room.medical,
            services=room.services,
            community=room.community,
            overall_rating=overall_rating(room),
            images=room.images[:LIST_IMAGE_LIMIT],
        )


class RoomDetail(Room):
    """Full room plus its derived figures."""

    overall_rating: float
    total_cost: float

    @classmethod
    def from_room(cls, room: Room) -> RoomDetail:
        return cls.model_validate(
            {
                **room.model_dump(),
                "overall_rating": overall_rating(room),
                "total_cost": total_cost(room),
            }
        )


class ComparedRoom(CamelModel):
    """Room as shown in a comparison."""

    id: str
    name: str
    facility_name: str
    location: Location
    pricing: Pricing
    room_type: RoomType
    occupancy: Occupancy
    care_level: CareLevel
    lifestyle: LifestyleRating
    medical: MedicalRating
    services: ServicesRating
    community: CommunityRating
    overall_rating: float
    total_cost: float
    facilities: Facilities
    medical_services: list[str]

    @classmethod
    def from_room(cls, room: Room) -> ComparedRoom:
        return cls(
            id=room.id,
            name=room.name,
            facility_name=room.facility_name,
            location=room.location,
            pricing=room.pricing,
            room_type=room.room_type,
            occupancy=room.occupancy,
            care_level=room.care_level,
            lifestyle=room.lifestyle,
            medical=room.medical,
            services=room.services,
            community=room.community,
            overall_rating=overall_rating(room),
            total_cost=total_cost(room),
            facilities=room.facilities,
            medical_services=room.medical_services,
        )


# ---------------------------------------------------------------------------
# Listing payload
# ---------------------------------------------------------------------------


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class Statistics(CamelModel):
    total_rooms: int
    average_rent: float
    top_rated_rooms: int

    @classmethod
    def from_stats(cls, stats: RoomStatistics) -> Statistics:
        return cls(
            total_rooms=stats.total_rooms,
            average_rent=stats.average_rent,
            top_rated_rooms=stats.top_rated_rooms,
        )


class RoomListData(CamelModel):
    rooms: list[RoomListItem]
    pagination: Pagination
    statistics: Statistics

    @classmethod
    def from_page(cls, page: RoomPage, stats: RoomStatistics) -> RoomListData:
        return cls(
            rooms=[RoomListItem.from_room(room) for room in page.items],
            pagination=Pagination(
                page=page.page,
                limit=page.limit,
                total=page.total,
                pages=page.pages,
            ),
            statistics=Statistics.from_stats(stats),
        )


class RoomDetailData(CamelModel):
    room: RoomDetail


# ---------------------------------------------------------------------------
# Comparison payload
# ---------------------------------------------------------------------------


class PriceRangeOut(CamelModel):
    min: float
    max: float
    average: int


class RatingEntryOut(CamelModel):
    id: str
    name: str
    rating: float


class RatingComparison(CamelModel):
    lifestyle: list[RatingEntryOut]
    medical: list[RatingEntryOut]
    services: list[RatingEntryOut]
    community: list[RatingEntryOut]
    overall: list[RatingEntryOut]


class ComparisonSummary(CamelModel):
    total_rooms: int
    price_range: PriceRangeOut
    rating_comparison: RatingComparison


class ComparisonData(CamelModel):
    rooms: list[ComparedRoom]
    summary: ComparisonSummary

    @classmethod
    def from_comparison(cls, comparison: Comparison) -> ComparisonData:
        def out(entries: list[RatingEntry]) -> list[RatingEntryOut]:
            return [RatingEntryOut(id=e.id, name=e.name, rating=e.rating) for e in entries]

        ratings = comparison.rating_comparison
        return cls(
            rooms=[ComparedRoom.from_room(room) for room in comparison.rooms],
            summary=ComparisonSummary(
                total_rooms=comparison.total_rooms,
                price_range=PriceRangeOut(
                    min=comparison.price_range.min,
                    max=comparison.price_range.max,
                    average=comparison.price_range.average,
                ),
                rating_comparison=RatingComparison(
                    **{category: out(entries) for category, entries in ratings.items()}
                ),
            ),
        )


# ---------------------------------------------------------------------------
# Seed payload
# ---------------------------------------------------------------------------


class SeedData(CamelModel):
    count: int
    room_ids: list[str]
