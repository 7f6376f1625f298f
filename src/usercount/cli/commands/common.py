"""Shared helpers for CLI commands."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable

from usercount.config import settings
from usercount.core.count_engine import CountEngine
from usercount.db.engine import SQLiteStorage


def build_storage() -> SQLiteStorage:
    return SQLiteStorage(
        settings.resolved_database_url(),
        connect_retries=settings.connect_retries,
        retry_backoff=settings.retry_backoff,
    )


def run_async(coro: Awaitable[int | None]) -> int:
    async def _runner() -> int | None:
        return await coro

    return int(asyncio.run(_runner()) or 0)


async def with_count_engine(fn) -> int | None:
    storage = build_storage()
    try:
        return await fn(CountEngine(storage))
    finally:
        # Let aiosqlite's worker thread settle a failed connect first.
        await asyncio.sleep(0)
        await storage.dispose()
