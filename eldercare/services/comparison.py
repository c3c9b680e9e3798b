"""Side-by-side comparison of 2–5 rooms.

:func:`compare_rooms` resolves a list of room ids to active rooms and builds a
summary over the rooms that resolved:

* ``price_range``: min / max / average of ``pricing.rent``.  Rent, not total
  cost, even though each room's total cost is shown next to it.
* ``rating_comparison``: for lifestyle, medical, services, community and
  overall, one ``(id, name, rating)`` entry per room in the same order as
  ``rooms``.

Ids that are malformed, unknown, inactive or repeated are dropped silently;
the call only fails when fewer than two distinct rooms remain.

Typical usage::

    from eldercare.services.comparison import compare_rooms

    comparison = await compare_rooms(repo, ["65f1…", "65f2…"])
    print(comparison.price_range.average)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from eldercare.core.exceptions import InsufficientRoomsError, InvalidComparisonSizeError
from eldercare.core.models import Room
from eldercare.core.ratings import overall_rating, round_half_up
from eldercare.core.request_context import RequestContext
from eldercare.storage.repository import RoomRepository

__all__ = [
    "MIN_COMPARE",
    "MAX_COMPARE",
    "RATING_CATEGORIES",
    "PriceRange",
    "RatingEntry",
    "Comparison",
    "check_comparison_size",
    "summarise",
    "compare_rooms",
]

logger = logging.getLogger(__name__)

MIN_COMPARE: int = 2
MAX_COMPARE: int = 5

#: Keys of :attr:`Comparison.rating_comparison`, in display order.
RATING_CATEGORIES: tuple[str, ...] = ("lifestyle", "medical", "services", "community", "overall")


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PriceRange:
    min: float
    max: float
    average: int


@dataclass(frozen=True)
class RatingEntry:
    id: str
    name: str
    rating: float


@dataclass(frozen=True)
class Comparison:
    """Rooms plus the summary computed over them.

    Attributes:
        rooms: Resolved rooms, lifestyle rating descending.
        price_range: Rent statistics over :attr:`rooms`.
        rating_comparison: Category name → entries, one per room, same order
            as :attr:`rooms`.
    """

    rooms: list[Room]
    price_range: PriceRange
    rating_comparison: dict[str, list[RatingEntry]] = field(default_factory=dict)

    @property
    def total_rooms(self) -> int:
        return len(self.rooms)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def check_comparison_size(room_ids: Sequence[str]) -> None:
    """Raise unless ``MIN_COMPARE ≤ len(room_ids) ≤ MAX_COMPARE``.

    The count includes duplicates: ``[a, a]`` passes this check and is
    rejected later because only one room resolves.

    Raises:
        :exc:`~eldercare.core.exceptions.InvalidComparisonSizeError`
    """
    count = len(room_ids)
    if count < MIN_COMPARE or count > MAX_COMPARE:
        raise InvalidComparisonSizeError(count, MIN_COMPARE, MAX_COMPARE)


def summarise(rooms: Sequence[Room]) -> Comparison:
    """Build the comparison summary for already-resolved *rooms*.

    *rooms* must not be empty.
    """
    rents = [room.pricing.rent for room in rooms]
    price_range = PriceRange(
        min=min(rents),
        max=max(rents),
        average=int(round_half_up(sum(rents) / len(rents))),
    )

    def entries(rating_of: Callable[[Room], float]) -> list[RatingEntry]:
        return [RatingEntry(id=room.id, name=room.name, rating=rating_of(room)) for room in rooms]

    rating_comparison = {
        "lifestyle": entries(lambda r: r.lifestyle.rating),
        "medical": entries(lambda r: r.medical.rating),
        "services": entries(lambda r: r.services.rating),
        "community": entries(lambda r: r.community.rating),
        "overall": entries(overall_rating),
    }
    return Comparison(rooms=list(rooms), price_range=price_range, rating_comparison=rating_comparison)


# ---------------------------------------------------------------------------
# Service entry-point
# ---------------------------------------------------------------------------


async def compare_rooms(
    repository: RoomRepository,
    room_ids: Sequence[str],
    ctx: RequestContext | None = None,
) -> Comparison:
    """Compare the active rooms named by *room_ids*.

    Args:
        repository: Room store.
        room_ids: 2 to 5 ids, as sent by the client.
        ctx: Caller context, used for logging only.

    Returns:
        The resolved rooms and their summary.

    Raises:
        :exc:`~eldercare.core.exceptions.InvalidComparisonSizeError`: Fewer
            than 2 or more than 5 ids.
        :exc:`~eldercare.core.exceptions.InsufficientRoomsError`: Fewer than 2
            distinct active rooms resolved.
        :exc:`~eldercare.core.exceptions.StoreError`: On database failure.
    """
    check_comparison_size(room_ids)

    rooms = await repository.find_for_comparison(room_ids)
    if len(rooms) < MIN_COMPARE:
        logger.info(
            "Comparison rejected: %d of %d ids resolved (actor=%s)",
            len(rooms),
            len(room_ids),
            ctx.actor if ctx is not None else "-",
        )
        raise InsufficientRoomsError(len(rooms), MIN_COMPARE)

    dropped = len(room_ids) - len(rooms)
    if dropped:
        logger.debug("Comparison dropped %d unresolved or repeated ids", dropped)

    return summarise(rooms)
