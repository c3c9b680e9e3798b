"""ElderCare process entry-point.

Usage:
    python -m eldercare [--seed] [--host HOST] [--port PORT]

Without ``--seed`` the API server starts under uvicorn.  With ``--seed`` the
database is filled with the sample rooms (replacing any existing ones) and
the process exits.

``configure_logging()`` runs first so every later import already has a
working logger.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import pydantic

from eldercare.core import configure_logging
from eldercare.core.exceptions import ConfigError, StoreError
from eldercare.core.settings import Settings


async def _seed(settings: Settings) -> int:
    from eldercare.storage.database import open_db  # noqa: PLC0415
    from eldercare.storage.repository import RoomRepository  # noqa: PLC0415
    from eldercare.storage.sample_data import seed_rooms  # noqa: PLC0415

    conn = await open_db(settings.database_path)
    try:
        rooms = await seed_rooms(RoomRepository(conn))
    finally:
        await conn.close()
    return len(rooms)


def main() -> None:
    """CLI entry-point registered in ``pyproject.toml``."""
    parser = argparse.ArgumentParser(
        prog="eldercare",
        description="Senior-living room search, comparison and rating API.",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Replace the stored rooms with the sample rooms and exit.",
    )
    parser.add_argument("--host", default=None, help="Override HOST env var.")
    parser.add_argument("--port", type=int, default=None, help="Override PORT env var.")
    parser.add_argument(
        "--log-level",
        default=None,
        metavar="LEVEL",
        help="Override LOG_LEVEL env var (DEBUG|INFO|WARNING|ERROR).",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        metavar="FORMAT",
        help="Override LOG_FORMAT env var (text|json).",
    )

    args = parser.parse_args()

    try:
        configure_logging(level=args.log_level, fmt=args.log_format)
    except ValueError as exc:
        print(f"eldercare: configuration error: {exc}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    logger = logging.getLogger(__name__)

    try:
        overrides = {k: v for k, v in (("host", args.host), ("port", args.port)) if v is not None}
        settings = Settings(**overrides)
    except pydantic.ValidationError as exc:
        logger.critical("Configuration error: %s", ConfigError(str(exc)))
        sys.exit(1)

    if args.seed:
        if settings.uses_memory_db:
            logger.warning("DATABASE_PATH is :memory:; the seeded rooms vanish when this process exits")
        try:
            count = asyncio.run(_seed(settings))
        except StoreError as exc:
            logger.critical("Seeding failed: %s", exc)
            sys.exit(1)
        logger.info("Seeded %d sample rooms into %s", count, settings.database_path_resolved)
        return

    # Lazy import keeps --seed runs free of the web stack.
    import uvicorn  # noqa: PLC0415

    from eldercare.api.app import create_app  # noqa: PLC0415

    logger.info("ElderCare API starting on %s:%d", settings.host, settings.port)
    try:
        uvicorn.run(
            create_app(settings),
            host=settings.host,
            port=settings.port,
            log_config=None,
        )
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting.")
        sys.exit(0)


if __name__ == "__main__":
    main()
