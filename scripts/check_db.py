#!/usr/bin/env python3
"""Simple database health check for usercount deployments."""

from __future__ import annotations

import asyncio

from usercount.config import settings
from usercount.core.count_engine import CountEngine
from usercount.core.exceptions import UserCountError
from usercount.db.engine import SQLiteStorage


async def _main() -> int:
    storage = SQLiteStorage(
        settings.resolved_database_url(),
        connect_retries=settings.connect_retries,
        retry_backoff=settings.retry_backoff,
    )
    try:
        total = await CountEngine(storage).count_users()
        print(f"OK: database reachable ({settings.database_path}), {total} users")
        return 0
    except UserCountError as exc:
        print(f"ERROR: database check failed [{exc.code}]: {exc.message} ({exc.__cause__})")
        return 1
    finally:
        await storage.dispose()


if __name__ == "__main__":
    raise SystemExit(asyncio.run(_main()))
