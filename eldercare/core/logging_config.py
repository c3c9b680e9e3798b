"""Process-wide logging setup for the ElderCare API.

:func:`configure_logging` is called once, first thing, by ``__main__`` (and
by the test suite with ``force=True``).  Modules never configure logging
themselves; each one declares::

    logger = logging.getLogger(__name__)

Every line carries the id of the HTTP request being served.  The request
middleware stores it in :data:`REQUEST_ID_CTX`; :class:`RequestContextFilter`
copies it onto each record, where both formats pick it up.

Access lines (one per request) go to the ``eldercare.access`` logger.
uvicorn's own access logger is turned down so requests are not logged twice.

Level and format fall back to the ``LOG_LEVEL`` / ``LOG_FORMAT`` environment
variables, then to ``INFO`` / ``text``.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

__all__ = [
    "ACCESS_LOGGER",
    "REQUEST_ID_CTX",
    "RequestContextFilter",
    "JsonFormatter",
    "configure_logging",
]

logger = logging.getLogger(__name__)

#: Id of the request currently being served; ``"-"`` outside a request.
REQUEST_ID_CTX: ContextVar[str] = ContextVar("request_id", default="-")

#: Logger name used by the request middleware for access lines.
ACCESS_LOGGER = "eldercare.access"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_FORMATS = ("text", "json")

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries whose INFO/DEBUG output is only wanted when debugging.
_CHATTY_LOGGERS = ("aiosqlite", "asyncio", "httpx", "httpcore")


class RequestContextFilter(logging.Filter):
    """Copy :data:`REQUEST_ID_CTX` onto every record as ``request_id``.

    Installed on the handler, so records from any logger get the attribute
    just before formatting.  Never drops a record.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.request_id = REQUEST_ID_CTX.get()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Shape::

        {"ts": "2026-03-01T09:15:02.114+00:00", "level": "INFO",
         "logger": "eldercare.access", "request_id": "3f2a9c1b",
         "message": "GET /api/rooms -> 200 (4.1 ms, anonymous@10.0.0.7)"}

    ``extra={...}`` values passed to a logging call appear under ``"extra"``;
    a traceback, when present, under ``"exc_info"``.
    """

    # Attributes every LogRecord has; anything else came from ``extra=``.
    _STANDARD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {
        "message",
        "asctime",
        "request_id",
    }

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "message": record.getMessage(),
        }

        extra = {k: v for k, v in record.__dict__.items() if k not in self._STANDARD_ATTRS}
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        elif record.exc_text:
            payload["exc_info"] = record.exc_text

        return json.dumps(payload, default=str)


def _build_handler(level: str, fmt: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=_TEXT_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def configure_logging(
    level: str | None = None,
    fmt: str | None = None,
    *,
    force: bool = False,
) -> None:
    """Install the ElderCare handler on the root logger.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (any case).
        fmt: ``"text"`` or ``"json"``.
        force: Replace handlers that are already installed.  Without it an
            already-configured root logger only has its level adjusted.

    Raises:
        ValueError: If *level* or *fmt* is not recognised.
    """
    resolved_level = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    resolved_fmt = (fmt or os.environ.get("LOG_FORMAT") or "text").lower()

    if resolved_level not in _LEVELS:
        raise ValueError(f"Unknown LOG_LEVEL {resolved_level!r}; expected one of {', '.join(_LEVELS)}")
    if resolved_fmt not in _FORMATS:
        raise ValueError(f"Unknown LOG_FORMAT {resolved_fmt!r}; expected one of {', '.join(_FORMATS)}")

    root = logging.getLogger()
    root.setLevel(resolved_level)
    if root.handlers and not force:
        return

    root.handlers.clear()
    root.addHandler(_build_handler(resolved_level, resolved_fmt))

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    chatty_level = logging.DEBUG if resolved_level == "DEBUG" else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)
