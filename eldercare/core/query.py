"""Room listing query model.

Defines :class:`RoomQuery`, the single typed description of *which rooms a
client wants to see and which page of them*.  It is built once per request
from the raw query string (:meth:`RoomQuery.from_params`) and translated to
SQL in exactly one place (:meth:`RoomQuery.to_where_clause`).

Filter semantics
----------------
* Filter groups are combined with ``AND``.
* ``city`` / ``area``: case-insensitive substring match.
* ``room_type``: exact match against :class:`~eldercare.core.models.RoomType`.
* ``min_rent`` / ``max_rent``: inclusive bounds on ``pricing.rent``.
* ``min_rating``: passes when **any** of the four sub-category ratings is at
  least the bound.  This is an ``OR`` across categories and deliberately not
  a filter on the overall rating: a room rated lifestyle 9 and 3 everywhere
  else passes ``min_rating=8``.
* ``search``: case-insensitive substring match against name, facility name,
  description, city or area (``OR`` inside the group).
* Only active rooms are ever matched.

Typical usage::

    from eldercare.core.query import RoomQuery

    query = RoomQuery.from_params({"city": "gurugram", "minRating": "8"})
    where, params = query.to_where_clause()
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

import pydantic
from pydantic import BaseModel, Field, model_validator

from eldercare.core.exceptions import FieldError, ValidationError
from eldercare.core.models import RoomType

__all__ = [
    "DEFAULT_PAGE",
    "DEFAULT_LIMIT",
    "MAX_PAGE",
    "MAX_LIMIT",
    "FOLD_FUNCTION",
    "RATING_COLUMNS",
    "SEARCH_COLUMNS",
    "ORDER_BY",
    "RoomQuery",
]

logger = logging.getLogger(__name__)

DEFAULT_PAGE: int = 1
DEFAULT_LIMIT: int = 10

#: Largest accepted page size; bigger requests are clamped to it.
MAX_LIMIT: int = 100

#: Largest accepted page number.  Keeps the row offset inside SQLite's
#: 64-bit integer range for any page size up to :data:`MAX_LIMIT`.
MAX_PAGE: int = 1_000_000_000

#: SQL function registered by :func:`~eldercare.storage.database.open_db`
#: that applies :meth:`str.casefold`.  SQLite's own ``lower()`` only folds
#: ASCII letters.
FOLD_FUNCTION: str = "casefold"

#: Store columns holding the four sub-category ratings.
RATING_COLUMNS: tuple[str, ...] = (
    "lifestyle_rating",
    "medical_rating",
    "services_rating",
    "community_rating",
)

#: Store columns scanned by the free-text ``search`` filter.
SEARCH_COLUMNS: tuple[str, ...] = ("name", "facility_name", "description", "city", "area")

#: Listing order: best lifestyle first, cheaper first among equals, then id
#: so every page boundary is stable.
ORDER_BY: str = "lifestyle_rating DESC, rent ASC, id ASC"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _blank_to_none(value: object) -> object:
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _coerce_positive_int(value: object, default: int, maximum: int) -> int:
    """Parse *value* as an integer in ``1..maximum``.

    Lenient like ``parseInt`` for the pagination inputs: ``"2"``, ``"2.7"``
    and ``2`` all give 2.  Unparseable, non-finite or sub-one values give
    *default*; values above *maximum* are clamped to it.
    """
    value = _blank_to_none(value)
    if value is None:
        return default
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number < 1:
        return default
    return min(int(number), maximum)


def _parse_number(value: object) -> float | None:
    """Parse an optional numeric filter; raise ``ValueError`` if malformed."""
    value = _blank_to_none(value)
    if value is None:
        return None
    number = float(value)  # type: ignore[arg-type]
    if not math.isfinite(number):
        raise ValueError(f"{value!r} is not a finite number")
    return number


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class RoomQuery(BaseModel):
    """Filters plus pagination for a room listing request.

    All bounds are *inclusive*.  ``None`` means "no constraint on this axis."

    Attributes:
        page: 1-based page number.
        limit: Page size.
        city: Substring of ``location.city`` (case-insensitive).
        area: Substring of ``location.area`` (case-insensitive).
        room_type: Exact room type.
        min_rent: Lowest acceptable rent.
        max_rent: Highest acceptable rent.
        min_rating: Lowest acceptable rating in *any* sub-category.
        search: Free text matched against name, facility name, description,
            city and area.
    """

    model_config = {"frozen": True}

    page: int = Field(DEFAULT_PAGE, ge=1, le=MAX_PAGE)
    limit: int = Field(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)
    city: str | None = None
    area: str | None = None
    room_type: RoomType | None = None
    min_rent: float | None = Field(None, ge=0)
    max_rent: float | None = Field(None, ge=0)
    min_rating: float | None = None
    search: str | None = None

    @model_validator(mode="after")
    def _validate_rent_range(self) -> RoomQuery:
        if (
            self.min_rent is not None
            and self.max_rent is not None
            and self.min_rent > self.max_rent
        ):
            raise ValueError(f"min_rent ({self.min_rent}) must be ≤ max_rent ({self.max_rent})")
        return self

    # ------------------------------------------------------------------
    # Construction from a raw query string
    # ------------------------------------------------------------------

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, Any],
        *,
        default_limit: int = DEFAULT_LIMIT,
    ) -> RoomQuery:
        """Build a query from raw request parameters (camelCase keys).

        ``page`` and ``limit`` are normalised, never rejected: a missing,
        non-numeric or non-positive value becomes the default and an
        oversized one is clamped to :data:`MAX_PAGE` / :data:`MAX_LIMIT`.
        Blank filter values are treated as absent.

        Args:
            params: Query-string mapping, e.g. ``request.query_params``.
            default_limit: Page size used when ``limit`` is missing or bad.

        Returns:
            A validated :class:`RoomQuery`.

        Raises:
            :exc:`~eldercare.core.exceptions.ValidationError`: If a numeric
                filter is not a number, ``roomType`` is not a known type, or
                ``minRent`` exceeds ``maxRent``.
        """
        errors: list[FieldError] = []
        values: dict[str, Any] = {
            "page": _coerce_positive_int(params.get("page"), DEFAULT_PAGE, MAX_PAGE),
            "limit": _coerce_positive_int(params.get("limit"), default_limit, MAX_LIMIT),
            "city": _blank_to_none(params.get("city")),
            "area": _blank_to_none(params.get("area")),
            "search": _blank_to_none(params.get("search")),
        }

        for key, name in (("minRent", "min_rent"), ("maxRent", "max_rent"), ("minRating", "min_rating")):
            try:
                values[name] = _parse_number(params.get(key))
            except (TypeError, ValueError):
                errors.append(FieldError(key, "must be a number"))

        room_type = _blank_to_none(params.get("roomType"))
        if room_type is not None:
            try:
                values["room_type"] = RoomType(room_type)
            except ValueError:
                allowed = ", ".join(t.value for t in RoomType)
                errors.append(FieldError("roomType", f"must be one of: {allowed}"))

        min_rent, max_rent = values.get("min_rent"), values.get("max_rent")
        if min_rent is not None and max_rent is not None and min_rent > max_rent:
            errors.append(FieldError("minRent", "must be less than or equal to maxRent"))

        if errors:
            raise ValidationError(errors, "Invalid room filters")

        try:
            return cls.model_validate(values)
        except pydantic.ValidationError as exc:
            raise ValidationError(
                [FieldError(_field_name(err), err["msg"]) for err in exc.errors()],
                "Invalid room filters",
            ) from exc

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    @property
    def offset(self) -> int:
        """Number of matching rows skipped before this page."""
        return (self.page - 1) * self.limit

    # ------------------------------------------------------------------
    # Translation to SQL
    # ------------------------------------------------------------------

    def to_where_clause(self) -> tuple[str, list[Any]]:
        """Translate the filters into a parameterised SQL ``WHERE`` body.

        Returns:
            ``(clause, params)`` where *clause* never starts with ``WHERE`` and
            *params* are positional ``?`` bindings in order.
        """
        conditions: list[str] = ["is_active = 1"]
        params: list[Any] = []

        for column, value in (("city", self.city), ("area", self.area)):
            if value is not None:
                conditions.append(f"instr({FOLD_FUNCTION}({column}), ?) > 0")
                params.append(value.casefold())

        if self.room_type is not None:
            conditions.append("room_type = ?")
            params.append(str(self.room_type))

        if self.min_rent is not None:
            conditions.append("rent >= ?")
            params.append(self.min_rent)
        if self.max_rent is not None:
            conditions.append("rent <= ?")
            params.append(self.max_rent)

        if self.min_rating is not None:
            conditions.append(
                "(" + " OR ".join(f"{col} >= ?" for col in RATING_COLUMNS) + ")"
            )
            params.extend([self.min_rating] * len(RATING_COLUMNS))

        if self.search is not None:
            needle = self.search.casefold()
            matches = (f"instr({FOLD_FUNCTION}({col}), ?) > 0" for col in SEARCH_COLUMNS)
            conditions.append("(" + " OR ".join(matches) + ")")
            params.extend([needle] * len(SEARCH_COLUMNS))

        return " AND ".join(conditions), params


_CAMEL_FIELD_NAMES = {
    "min_rent": "minRent",
    "max_rent": "maxRent",
    "min_rating": "minRating",
    "room_type": "roomType",
}


def _field_name(err: Mapping[str, Any]) -> str:
    """Map a pydantic error location back to the query-string parameter name."""
    loc = err.get("loc") or ()
    if not loc:
        return "query"
    name = str(loc[0])
    return _CAMEL_FIELD_NAMES.get(name, name)
