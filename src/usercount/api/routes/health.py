"""Health check endpoints."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from usercount import __version__
from usercount.api.deps import get_storage
from usercount.core.exceptions import UserCountError
from usercount.db.engine import SQLiteStorage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def root() -> dict:
    """Describe the service. Never touches storage."""
    return {
        "message": "User Count API is running!",
        "version": __version__,
        "endpoints": {
            "userCount": "/api/usercount",
            "health": "/",
        },
    }


@router.get("/health/db")
async def health_db(
    request: Request,
    storage: SQLiteStorage = Depends(get_storage),
):
    """Report database connectivity and process uptime."""
    uptime = round(time.monotonic() - request.app.state.started_at, 3)
    try:
        ok = await storage.ping()
    except UserCountError as exc:
        logger.warning("Database health check failed [%s]: %s", exc.code, exc.message)
        ok = False
    if not ok:
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": "unavailable", "uptime": uptime},
        )
    return {"status": "ok", "database": "connected", "uptime": uptime}
