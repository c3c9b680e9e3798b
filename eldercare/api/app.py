"""FastAPI application factory.

:func:`create_app` wires together the settings, the room repository, CORS,
the request-id middleware, the error handlers and the room router.

The repository lives on ``app.state.repository``.  When one is passed in,
the app uses it as-is and never closes it; otherwise the lifespan opens the
SQLite database named by :attr:`Settings.database_path` at startup and closes
it at shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from eldercare.api.errors import install_exception_handlers
from eldercare.api.routes import router
from eldercare.api.schemas import HealthResponse
from eldercare.core.logging_config import ACCESS_LOGGER, REQUEST_ID_CTX
from eldercare.core.request_context import RequestContext
from eldercare.core.settings import Settings
from eldercare.storage.database import open_db
from eldercare.storage.repository import RoomRepository
from eldercare.storage.sample_data import seed_rooms

__all__ = ["create_app", "REQUEST_ID_HEADER"]

logger = logging.getLogger(__name__)
access_logger = logging.getLogger(ACCESS_LOGGER)

REQUEST_ID_HEADER = "X-Request-ID"


def create_app(
    settings: Settings | None = None,
    repository: RoomRepository | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Configuration; loaded from the environment when omitted.
        repository: Pre-built room store.  Owned by the caller.
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if repository is not None:
            yield
            return

        conn = await open_db(settings.database_path)
        app.state.repository = RoomRepository(conn)
        try:
            if settings.seed_on_startup:
                await seed_rooms(app.state.repository)
            logger.info("ElderCare API ready (cors=%s)", ", ".join(settings.cors_origins) or "-")
            yield
        finally:
            await conn.close()
            logger.info("Database connection closed")

    app = FastAPI(title="ElderCare API", lifespan=lifespan)
    app.state.settings = settings
    if repository is not None:
        app.state.repository = repository

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        ctx = RequestContext.new(
            request_id=request.headers.get(REQUEST_ID_HEADER),
            client_host=request.client.host if request.client else None,
        )
        request.state.ctx = ctx
        token = REQUEST_ID_CTX.set(ctx.request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            response.headers[REQUEST_ID_HEADER] = ctx.request_id
            access_logger.info(
                "%s %s -> %d (%.1f ms, %s)",
                request.method,
                request.url.path,
                response.status_code,
                elapsed_ms,
                ctx.actor,
            )
            return response
        finally:
            REQUEST_ID_CTX.reset(token)

    install_exception_handlers(app)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse()

    app.include_router(router)

    return app
