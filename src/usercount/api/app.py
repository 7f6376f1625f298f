"""FastAPI application: usercount."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from usercount import __version__
from usercount.api.routes import health, users
from usercount.config import Settings, settings
from usercount.core.count_engine import CountEngine
from usercount.core.exceptions import UserCountError
from usercount.db.engine import SQLiteStorage
from usercount.logging_config import log_context, setup_logging

logger = logging.getLogger(__name__)


def create_app(
    config: Settings | None = None,
    storage: SQLiteStorage | None = None,
) -> FastAPI:
    """Build the application and the services it hands to routes.

    ``storage`` lets callers substitute a backend; by default one is built
    from ``config``. Both live on ``app.state`` for the app's lifetime.
    """
    if config is None:
        config = settings
    if storage is None:
        storage = SQLiteStorage(
            config.resolved_database_url(),
            connect_retries=config.connect_retries,
            retry_backoff=config.retry_backoff,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("usercount starting up")
        try:
            await storage.ping()
            logger.info("Database reachable")
        except UserCountError as exc:
            logger.warning("Database not reachable at startup [%s]: %s", exc.code, exc.message)
        try:
            yield
        finally:
            await storage.dispose()
            logger.info("usercount shut down")

    app = FastAPI(
        title="usercount",
        description="Row count of user_list over HTTP",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.storage = storage
    app.state.count_engine = CountEngine(storage)
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["health"])
    app.include_router(users.router, tags=["users"])

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, _exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error",
            extra=log_context(method=request.method, path=request.url.path),
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "message": "Something went wrong!",
            },
        )

    return app


def build_app() -> FastAPI:
    """uvicorn factory: configure logging, then build from env settings."""
    setup_logging()
    return create_app()
