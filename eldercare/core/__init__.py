"""Core domain models, query model, settings, logging configuration, and shared utilities."""

from eldercare.core.exceptions import (
    ComparisonError,
    ConfigError,
    ElderCareError,
    FieldError,
    InsufficientRoomsError,
    InvalidComparisonSizeError,
    InvalidIdError,
    NotFoundError,
    RequestError,
    StoreError,
    ValidationError,
)
from eldercare.core.logging_config import JsonFormatter, configure_logging
from eldercare.core.models import Room, RoomDraft, RoomType
from eldercare.core.query import RoomQuery
from eldercare.core.request_context import RequestContext
from eldercare.core.settings import Settings

__all__ = [
    # Logging
    "configure_logging",
    "JsonFormatter",
    # Domain models
    "Room",
    "RoomDraft",
    "RoomType",
    # Query
    "RoomQuery",
    # Request context
    "RequestContext",
    # Settings
    "Settings",
    # Exceptions: base
    "ElderCareError",
    # Exceptions: config
    "ConfigError",
    # Exceptions: store
    "StoreError",
    # Exceptions: request
    "RequestError",
    "FieldError",
    "ValidationError",
    "InvalidIdError",
    "NotFoundError",
    # Exceptions: comparison
    "ComparisonError",
    "InvalidComparisonSizeError",
    "InsufficientRoomsError",
]
