"""Per-request context for the ElderCare API.

A :class:`RequestContext` is created once per HTTP request by the API layer
and passed **explicitly** to every service call that needs to know who is
asking.  Nothing reads identity from a mutated request object or a global.

Fields
------
request_id
    Correlation id for log lines and the ``X-Request-ID`` response header.
    Taken from the incoming ``X-Request-ID`` header when present, otherwise
    a fresh 8-char hex string.

client_host
    Remote address as reported by the ASGI server; ``None`` if unknown.

identity
    Authenticated principal, if an authentication layer in front of the
    service resolved one.  The room read endpoints never require it, so it is
    ``None`` for every public request.

Typical usage::

    from eldercare.core.request_context import RequestContext

    ctx = RequestContext.new(client_host="127.0.0.1")
    logger.info("Seeding rooms (actor=%s)", ctx.actor)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

__all__ = ["RequestContext"]

logger = logging.getLogger(__name__)

_MAX_REQUEST_ID_LENGTH = 64


@dataclass(frozen=True)
class RequestContext:
    """Immutable container for request-scoped values.

    Attributes:
        request_id: Correlation id for this request.
        client_host: Remote address, if known.
        identity: Authenticated principal, or ``None`` for anonymous callers.
    """

    request_id: str
    client_host: str | None = field(default=None)
    identity: str | None = field(default=None)

    @classmethod
    def new(
        cls,
        *,
        request_id: str | None = None,
        client_host: str | None = None,
        identity: str | None = None,
    ) -> RequestContext:
        """Build a context, generating a request id when none is supplied.

        An incoming id that is blank or longer than 64 characters is replaced
        by a generated one so log lines stay readable.
        """
        rid = (request_id or "").strip()
        if not rid or len(rid) > _MAX_REQUEST_ID_LENGTH:
            rid = uuid.uuid4().hex[:8]
        return cls(request_id=rid, client_host=client_host, identity=identity)

    # ------------------------------------------------------------------
    # Derived properties
    # ------------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def actor(self) -> str:
        """Human-readable caller label for log lines."""
        if self.identity is not None:
            return self.identity
        return f"anonymous@{self.client_host or 'unknown'}"

    def __str__(self) -> str:
        return f"RequestContext(id={self.request_id}, actor={self.actor})"
