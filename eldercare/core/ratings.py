"""Derived room figures: overall rating and total cost.

Both values are pure functions of a room's current fields.  They are computed
while a response is being shaped and are never written to the store, so an
edited sub-rating or charge is reflected on the very next read.

Rounding is *half-up* (``8.25 -> 8.3``, ``80000.5 -> 80001``), not Python's
default round-half-to-even.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from eldercare.core.models import Room

__all__ = [
    "round_half_up",
    "overall_rating",
    "total_cost",
    "TOP_RATED_THRESHOLD",
    "is_top_rated",
]

logger = logging.getLogger(__name__)

#: A room counts as top-rated when any sub-rating reaches this value.
TOP_RATED_THRESHOLD: int = 8


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round *value* to *ndigits* decimals, ties away from zero for positives.

    Args:
        value: Number to round.
        ndigits: Decimal places to keep.

    Returns:
        The rounded value.  With ``ndigits=0`` the result is still a float;
        callers wanting an int should wrap it in :func:`int`.
    """
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def overall_rating(room: Room) -> float:
    """Mean of the four sub-category ratings, rounded to one decimal.

    Example: lifestyle 8, medical 9, services 8, community 8 -> 8.3.
    """
    ratings = room.ratings()
    return round_half_up(sum(ratings) / len(ratings), 1)


def total_cost(room: Room) -> float:
    """Rent plus admission charge and petty-cash reserve when present."""
    pricing = room.pricing
    return pricing.rent + (pricing.admission_charge or 0) + (pricing.petty_cash_reserve or 0)


def is_top_rated(ratings: Iterable[float]) -> bool:
    """Return ``True`` if any rating reaches :data:`TOP_RATED_THRESHOLD`."""
    return any(r >= TOP_RATED_THRESHOLD for r in ratings)
