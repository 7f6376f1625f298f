"""REST API routes for user counts."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from usercount.api.deps import get_count_engine, get_settings
from usercount.config import Settings
from usercount.core.count_engine import CountEngine
from usercount.core.exceptions import QueryError, StorageConnectionError, UserCountError
from usercount.logging_config import log_context

logger = logging.getLogger(__name__)

router = APIRouter()

COUNT_FAILED_MESSAGE = "Failed to retrieve user count from database"


def _error_details(exc: UserCountError, debug: bool) -> str:
    """Short failure text for clients; driver detail only in debug mode."""
    if debug and exc.__cause__ is not None:
        return f"{exc.message} ({exc.__cause__})"
    return exc.message


@router.get("/api/usercount")
async def user_count(
    request: Request,
    engine: CountEngine = Depends(get_count_engine),
    config: Settings = Depends(get_settings),
):
    """Total number of rows in user_list."""
    try:
        total = await engine.count_users()
    except (StorageConnectionError, QueryError) as exc:
        logger.exception(
            "Database error: %s",
            exc.message,
            extra=log_context(exc.code, request.method, request.url.path),
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "message": COUNT_FAILED_MESSAGE,
                "details": _error_details(exc, config.debug),
            },
        )
    return {"totalUsers": total}
