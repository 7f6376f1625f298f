"""Tests for CountEngine: row counts and connection release on every path."""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy.pool import AsyncAdaptedQueuePool

from usercount.config import build_database_url
from usercount.core.count_engine import CountEngine
from usercount.core.exceptions import QueryError, StorageConnectionError
from usercount.db.engine import SQLiteStorage
from usercount.db.setup import SAMPLE_USERS, add_users, setup_database


def _users(prefix: str, n: int) -> list[dict[str, str]]:
    return [
        {"username": f"{prefix}_{i}", "email": f"{prefix}_{i}@example.com"}
        for i in range(n)
    ]


@pytest.mark.asyncio
async def test_count_empty_table(storage):
    engine = CountEngine(storage)
    assert await engine.count_users() == 0


@pytest.mark.asyncio
async def test_count_sample_users(storage, db_path):
    await setup_database(db_path)
    engine = CountEngine(storage)
    assert await engine.count_records("user_list") == len(SAMPLE_USERS)


@pytest.mark.asyncio
async def test_count_grows_with_inserts(storage, db_path):
    engine = CountEngine(storage)
    before = await engine.count_users()

    await add_users(db_path, _users("batch", 7))

    assert await engine.count_users() == before + 7


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name",
    ["user_list; DROP TABLE user_list", 'user"list', "", "1users", "user list"],
)
async def test_invalid_collection_name_opens_nothing(storage, monkeypatch, name):
    opened = []
    original = storage.open

    async def spy_open():
        opened.append(1)
        return await original()

    monkeypatch.setattr(storage, "open", spy_open)
    engine = CountEngine(storage)

    with pytest.raises(QueryError):
        await engine.count_records(name)
    assert opened == []


@pytest.mark.asyncio
async def test_missing_table_raises_query_error(storage):
    engine = CountEngine(storage)
    with pytest.raises(QueryError):
        await engine.count_records("no_such_table")
    assert storage.open_handles == 0


@pytest.mark.asyncio
async def test_missing_database_propagates_connection_error(missing_db_path):
    storage = SQLiteStorage(build_database_url(missing_db_path))
    engine = CountEngine(storage)
    try:
        with pytest.raises(StorageConnectionError):
            await engine.count_users()
    finally:
        await storage.dispose()


@pytest.mark.asyncio
async def test_repeated_calls_never_exhaust_single_connection_pool(db_path):
    await setup_database(db_path)
    storage = SQLiteStorage(
        build_database_url(db_path),
        engine_kwargs={
            "poolclass": AsyncAdaptedQueuePool,
            "pool_size": 1,
            "max_overflow": 0,
            "pool_timeout": 1,
        },
    )
    engine = CountEngine(storage)
    try:
        for i in range(120):
            if i % 3 == 0:
                with pytest.raises(QueryError):
                    await engine.count_records("no_such_table")
            else:
                assert await engine.count_users() == len(SAMPLE_USERS)
        assert storage.engine.pool.checkedout() == 0
        assert storage.open_handles == 0
    finally:
        await storage.dispose()


@pytest.mark.asyncio
async def test_concurrent_counts_use_separate_handles(storage, db_path):
    await setup_database(db_path)
    engine = CountEngine(storage)

    results = await asyncio.gather(*(engine.count_users() for _ in range(20)))

    assert results == [len(SAMPLE_USERS)] * 20
    assert storage.open_handles == 0


@pytest.mark.asyncio
async def test_cancelled_count_releases_connection(storage, monkeypatch):
    original = storage.query_scalar
    in_query = asyncio.Event()

    async def slow_query_scalar(handle, statement, params=None):
        in_query.set()
        await asyncio.sleep(30)
        return await original(handle, statement, params)

    monkeypatch.setattr(storage, "query_scalar", slow_query_scalar)
    engine = CountEngine(storage)

    task = asyncio.create_task(engine.count_users())
    await in_query.wait()
    assert storage.open_handles == 1

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert storage.open_handles == 0
