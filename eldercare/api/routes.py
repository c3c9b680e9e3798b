"""Room endpoints, mounted under ``/api/rooms``."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from eldercare.api.schemas import (
    ApiResponse,
    CompareRequest,
    ComparisonData,
    RoomDetail,
    RoomDetailData,
    RoomListData,
    SeedData,
)
from eldercare.core.exceptions import NotFoundError
from eldercare.core.query import RoomQuery
from eldercare.core.request_context import RequestContext
from eldercare.core.settings import Settings
from eldercare.services.comparison import check_comparison_size, compare_rooms
from eldercare.storage.repository import RoomRepository
from eldercare.storage.sample_data import seed_rooms

__all__ = ["router", "get_repository", "get_settings", "get_request_context"]

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_repository(request: Request) -> RoomRepository:
    return request.app.state.repository


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_request_context(request: Request) -> RequestContext:
    ctx = getattr(request.state, "ctx", None)
    if ctx is None:
        client = request.client.host if request.client else None
        ctx = RequestContext.new(client_host=client)
    return ctx


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=ApiResponse[RoomListData], response_model_by_alias=True)
async def list_rooms(
    request: Request,
    repository: RoomRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
) -> ApiResponse[RoomListData]:
    """Filtered, paginated room listing plus collection-wide statistics."""
    query = RoomQuery.from_params(request.query_params, default_limit=settings.default_page_limit)
    page = await repository.find_all(query)
    stats = await repository.get_statistics()
    return ApiResponse[RoomListData](data=RoomListData.from_page(page, stats))


@router.get("/{room_id}", response_model=ApiResponse[RoomDetailData], response_model_by_alias=True)
async def get_room(
    room_id: str,
    repository: RoomRepository = Depends(get_repository),
) -> ApiResponse[RoomDetailData]:
    room = await repository.find_by_id(room_id)
    if room is None:
        raise NotFoundError()
    return ApiResponse[RoomDetailData](data=RoomDetailData(room=RoomDetail.from_room(room)))


@router.post("/compare", response_model=ApiResponse[ComparisonData], response_model_by_alias=True)
async def compare(
    payload: CompareRequest,
    repository: RoomRepository = Depends(get_repository),
    ctx: RequestContext = Depends(get_request_context),
) -> ApiResponse[ComparisonData]:
    """Compare 2 to 5 rooms side by side."""
    check_comparison_size(payload.room_ids)
    comparison = await compare_rooms(repository, payload.room_ids, ctx)
    return ApiResponse[ComparisonData](data=ComparisonData.from_comparison(comparison))


@router.post("/seed", response_model=ApiResponse[SeedData], response_model_by_alias=True)
async def seed(
    repository: RoomRepository = Depends(get_repository),
    ctx: RequestContext = Depends(get_request_context),
) -> ApiResponse[SeedData]:
    """Replace the whole collection with the sample rooms."""
    rooms = await seed_rooms(repository, ctx)
    return ApiResponse[SeedData](
        message="Sample rooms seeded successfully",
        data=SeedData(count=len(rooms), room_ids=[room.id for room in rooms]),
    )
