"""Read-side services built on the room repository."""

from eldercare.services.comparison import Comparison, compare_rooms

__all__ = ["Comparison", "compare_rooms"]
