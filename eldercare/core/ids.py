"""Room id strategy.

Room ids are opaque to clients but have a fixed shape: 24 lowercase
hexadecimal characters, the same shape as the document-store ids the API has
always handed out.  The store issues a fresh id on every insert and the id
never changes afterwards.

Keeping the shape check here lets the API tell two cases apart:

* a **malformed** id (``"abc"``) is the client's mistake, and
  :func:`validate_room_id` raises :class:`~eldercare.core.exceptions.InvalidIdError`;
* a **well-formed** id that is not in the store is a plain miss, reported as
  ``None`` by the repository.

Typical usage::

    from eldercare.core.ids import new_room_id, validate_room_id

    rid = new_room_id()                 # '65f1c0e2a4b3d2c1e0f9a8b7'
    validate_room_id(rid)               # returns rid unchanged
"""

from __future__ import annotations

import logging
import re
import secrets

from eldercare.core.exceptions import InvalidIdError

__all__ = [
    "ROOM_ID_LENGTH",
    "new_room_id",
    "is_valid_room_id",
    "validate_room_id",
]

logger = logging.getLogger(__name__)

#: Number of hex characters in a room id.
ROOM_ID_LENGTH: int = 24

_ROOM_ID_RE = re.compile(rf"[0-9a-f]{{{ROOM_ID_LENGTH}}}")


def new_room_id() -> str:
    """Return a fresh random room id."""
    return secrets.token_hex(ROOM_ID_LENGTH // 2)


def is_valid_room_id(value: object) -> bool:
    """Return ``True`` if *value* is a string with the room id shape."""
    return isinstance(value, str) and _ROOM_ID_RE.fullmatch(value) is not None


def validate_room_id(value: str) -> str:
    """Return *value* unchanged if it is a well-formed room id.

    Raises:
        :exc:`~eldercare.core.exceptions.InvalidIdError`: If the shape is wrong.
    """
    if not is_valid_room_id(value):
        raise InvalidIdError(value)
    return value
