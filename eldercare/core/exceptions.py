"""ElderCare exception taxonomy.

Every custom exception inherits from :class:`ElderCareError`.  Exceptions are
organised by architectural layer so callers can catch at the right granularity:

    Layer hierarchy
    ---------------
    ElderCareError
    ├── ConfigError
    ├── StoreError
    └── RequestError
        ├── ValidationError
        ├── InvalidIdError
        ├── NotFoundError
        └── ComparisonError
            ├── InvalidComparisonSizeError
            └── InsufficientRoomsError

:class:`RequestError` subclasses describe a problem with what the client
asked for and carry the HTTP status the API layer should answer with.
:class:`StoreError` is a server-side failure; its detail is logged and never
shown to the client.

Usage:

    from eldercare.core.exceptions import StoreError

    raise StoreError("Error finding rooms") from exc
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

__all__ = [
    "ElderCareError",
    # Config
    "ConfigError",
    # Store
    "StoreError",
    # Request
    "RequestError",
    "FieldError",
    "ValidationError",
    "InvalidIdError",
    "NotFoundError",
    # Comparison
    "ComparisonError",
    "InvalidComparisonSizeError",
    "InsufficientRoomsError",
]

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class ElderCareError(Exception):
    """Root exception for all ElderCare errors.

    Catch this to handle any application-level error uniformly.  Prefer
    catching layer-specific subclasses wherever possible for precise error
    handling.
    """


# ---------------------------------------------------------------------------
# Config layer
# ---------------------------------------------------------------------------


class ConfigError(ElderCareError):
    """Raised when the application configuration is invalid or incomplete.

    Examples:
        - The database directory cannot be created.
        - A variable contains an out-of-range value (e.g. port 0).
    """


# ---------------------------------------------------------------------------
# Store layer
# ---------------------------------------------------------------------------


class StoreError(ElderCareError):
    """Raised when a database query or write fails.

    The message is meant for server logs.  The API layer answers HTTP 500
    with a generic message instead of echoing it.

    Args:
        message: Human-readable error description.
    """


# ---------------------------------------------------------------------------
# Request layer
# ---------------------------------------------------------------------------


class RequestError(ElderCareError):
    """Base class for errors caused by the client's request.

    Attributes:
        status_code: HTTP status the API layer responds with.
    """

    status_code: int = 400


@dataclass(frozen=True)
class FieldError:
    """One offending request field and why it was rejected."""

    field: str
    message: str


class ValidationError(RequestError):
    """Raised when a filter or request-body field is malformed or missing.

    Args:
        errors: The offending fields.  At least one is expected.
        message: Summary message; defaults to a generic one.
    """

    status_code = 400

    def __init__(
        self,
        errors: list[FieldError],
        message: str = "Invalid request parameters",
    ) -> None:
        self.errors = list(errors)
        fields = ", ".join(e.field for e in self.errors) or "-"
        super().__init__(f"{message} ({fields})")
        self.message = message


class InvalidIdError(RequestError):
    """Raised when a room id does not have the store's id format.

    Args:
        room_id: The rejected value.
    """

    status_code = 400

    def __init__(self, room_id: str) -> None:
        self.room_id = room_id
        super().__init__(f"Invalid room ID format: {room_id!r}")


class NotFoundError(RequestError):
    """Raised when a well-formed room id does not resolve to a room."""

    status_code = 404

    def __init__(self, message: str = "Room not found") -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


class ComparisonError(RequestError):
    """Base class for errors raised by the comparison service."""

    status_code = 400


class InvalidComparisonSizeError(ComparisonError):
    """Raised when fewer than the minimum or more than the maximum ids are sent.

    Args:
        count: Number of ids received (duplicates included).
        minimum: Smallest accepted count.
        maximum: Largest accepted count.
    """

    def __init__(self, count: int, minimum: int, maximum: int) -> None:
        self.count = count
        self.minimum = minimum
        self.maximum = maximum
        if count < minimum:
            message = f"At least {minimum} room IDs are required for comparison"
        else:
            message = f"Cannot compare more than {maximum} rooms at once"
        super().__init__(message)


class InsufficientRoomsError(ComparisonError):
    """Raised when too few of the requested ids resolve to active rooms.

    Args:
        resolved: Number of distinct active rooms that were found.
        minimum: Smallest number needed for a comparison.
    """

    def __init__(self, resolved: int, minimum: int) -> None:
        self.resolved = resolved
        self.minimum = minimum
        super().__init__(f"At least {minimum} valid rooms are required for comparison")
