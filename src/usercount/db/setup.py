"""Create and populate the SQLite database the service reads from."""

from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import delete, func, insert, select
from sqlalchemy.engine import URL

from usercount.config import build_database_url
from usercount.db.engine import build_engine
from usercount.db.models import Base, UserRecord

logger = logging.getLogger(__name__)

SAMPLE_USERS = [
    {"username": "john_doe", "email": "john.doe@example.com"},
    {"username": "jane_smith", "email": "jane.smith@example.com"},
    {"username": "bob_johnson", "email": "bob.johnson@example.com"},
    {"username": "alice_williams", "email": "alice.williams@example.com"},
    {"username": "charlie_brown", "email": "charlie.brown@example.com"},
    {"username": "diana_davis", "email": "diana.davis@example.com"},
    {"username": "evan_miller", "email": "evan.miller@example.com"},
    {"username": "fiona_wilson", "email": "fiona.wilson@example.com"},
    {"username": "george_moore", "email": "george.moore@example.com"},
    {"username": "helen_taylor", "email": "helen.taylor@example.com"},
]


async def setup_database(
    path: str | Path | None = None,
    users: list[dict[str, str]] | None = None,
    *,
    url: str | URL | None = None,
) -> int:
    """Create ``user_list`` if needed and replace its rows.

    The database file is created when missing. Existing rows are deleted
    and ``users`` (the sample set by default, pass ``[]`` for an empty
    table) is inserted in one transaction. ``url`` replaces ``path``
    and is used as given, including its own open mode.

    Returns:
        The row count after population.
    """
    if url is None and path is None:
        raise ValueError("setup_database needs a path or a url")
    rows = SAMPLE_USERS if users is None else users
    target = url if url is not None else build_database_url(path, create=True)
    engine = build_engine(target)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            await conn.execute(delete(UserRecord))
            if rows:
                await conn.execute(insert(UserRecord), rows)
            result = await conn.execute(select(func.count()).select_from(UserRecord))
            total = int(result.scalar_one())
    finally:
        await engine.dispose()
    logger.info("Inserted %d users, %d total in %s", len(rows), total, path or url)
    return total


async def add_users(path: str | Path, users: list[dict[str, str]]) -> None:
    """Append rows to an existing ``user_list``."""
    engine = build_engine(build_database_url(path))
    try:
        async with engine.begin() as conn:
            await conn.execute(insert(UserRecord), users)
    finally:
        await engine.dispose()
