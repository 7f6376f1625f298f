"""Pytest fixtures for usercount tests (temporary SQLite files)."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from usercount.api.app import create_app
from usercount.config import Settings, build_database_url
from usercount.db.engine import SQLiteStorage
from usercount.db.setup import setup_database


@pytest_asyncio.fixture
async def db_path(tmp_path):
    """An existing database file with an empty user_list table."""
    path = tmp_path / "usercount.db"
    await setup_database(path, users=[])
    return path


@pytest.fixture
def missing_db_path(tmp_path):
    """A database path that does not exist on disk."""
    return tmp_path / "missing" / "usercount.db"


@pytest.fixture
def test_settings(db_path) -> Settings:
    return Settings(
        database_path=str(db_path),
        database_url="",
        connect_retries=1,
        retry_backoff=0.0,
        debug=False,
    )


@pytest_asyncio.fixture
async def storage(db_path):
    storage = SQLiteStorage(build_database_url(db_path))
    yield storage
    await storage.dispose()


def _asgi_client(app) -> AsyncClient:
    # Starlette re-raises unhandled exceptions after sending the 500
    # response; keep them out of the test client.
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture
def make_client():
    """Build a test client for an app assembled inside the test."""
    return _asgi_client


@pytest_asyncio.fixture
async def client(storage, test_settings):
    app = create_app(test_settings, storage=storage)
    async with _asgi_client(app) as client:
        yield client
