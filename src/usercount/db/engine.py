"""Storage access: open a SQLite session, run one scalar query, release it."""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import URL, Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool
from sqlalchemy.sql.elements import ClauseElement

from usercount.core.exceptions import QueryError, ReleaseError, StorageConnectionError
from usercount.logging_config import log_context

logger = logging.getLogger(__name__)

DB_CONNECT_ERROR = "Unable to connect to the database."
DB_QUERY_ERROR = "Database query failed."
DB_CLOSED_HANDLE_ERROR = "Connection handle is already closed."
DB_RELEASE_ERROR = "Error closing database connection."


def _get_engine_kwargs() -> dict:
    """Get standard engine kwargs (NullPool: one real connection per open)."""
    return {
        "echo": False,
        "poolclass": NullPool,
    }


def build_engine(url: str | URL, overrides: Mapping[str, Any] | None = None) -> AsyncEngine:
    kwargs = _get_engine_kwargs()
    kwargs.update(overrides or {})
    return create_async_engine(url, **kwargs)


class SQLiteStorage:
    """Connection-per-operation access to the SQLite store.

    Built once at process start and shared by reference; it holds no
    per-request state. Handles returned by :meth:`open` belong to the
    caller and must go back through :meth:`close`, which
    :meth:`connection` guarantees.
    """

    def __init__(
        self,
        database_url: str | URL,
        connect_retries: int = 1,
        retry_backoff: float = 0.0,
        engine_kwargs: Mapping[str, Any] | None = None,
    ) -> None:
        self._engine = build_engine(database_url, engine_kwargs)
        self._connect_retries = max(1, connect_retries)
        self._retry_backoff = max(0.0, retry_backoff)
        self._open_handles = 0
        self._owned: weakref.WeakSet = weakref.WeakSet()

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def open_handles(self) -> int:
        """Handles opened through this accessor and not yet released."""
        return self._open_handles

    async def open(self) -> AsyncConnection:
        """Open a session, retrying connection failures.

        Raises:
            StorageConnectionError: the store stayed unreachable for every
                attempt.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                handle = await self._connect()
            except StorageConnectionError:
                if attempt >= self._connect_retries:
                    raise
                delay = self._retry_backoff * attempt
                logger.warning(
                    "Database connection attempt %d/%d failed, retrying in %.2fs",
                    attempt,
                    self._connect_retries,
                    delay,
                )
                await asyncio.sleep(delay)
                continue
            self._owned.add(handle)
            self._open_handles += 1
            return handle

    async def _connect(self) -> AsyncConnection:
        try:
            handle = await self._engine.connect()
        except (SQLAlchemyError, OSError) as exc:
            raise StorageConnectionError(DB_CONNECT_ERROR) from exc
        logger.debug("Connected to the SQLite database.")
        return handle

    async def query_scalar(
        self,
        handle: AsyncConnection,
        statement: str | ClauseElement,
        params: Mapping[str, Any] | None = None,
    ) -> Row | None:
        """Execute a statement expected to yield at most one row.

        Returns the row, or ``None`` when nothing matched.

        Raises:
            QueryError: the handle is closed, the statement is malformed,
                the engine faulted, or more than one row came back.
        """
        if handle.closed:
            raise QueryError(DB_CLOSED_HANDLE_ERROR)
        stmt = text(statement) if isinstance(statement, str) else statement
        try:
            result = await handle.execute(stmt, dict(params or {}))
            return result.one_or_none()
        except SQLAlchemyError as exc:
            raise QueryError(DB_QUERY_ERROR) from exc

    async def close(self, handle: AsyncConnection | None) -> None:
        """Release a session. Never raises.

        Accepts ``None`` and handles that are already closed or broken.
        Handles not produced by :meth:`open` are closed but not counted.
        Release failures are logged as :class:`ReleaseError` so they never
        replace the outcome of the operation being cleaned up after.
        """
        if handle is None:
            return
        owned = handle in self._owned
        self._owned.discard(handle)
        if handle.closed:
            if owned:
                self._open_handles -= 1
            return
        try:
            await handle.close()
        except Exception as exc:
            err = ReleaseError(DB_RELEASE_ERROR)
            err.__cause__ = exc
            logger.error(err.message, exc_info=err, extra=log_context(err.code))
        else:
            logger.debug("Database connection closed successfully.")
        finally:
            if owned:
                self._open_handles -= 1

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[AsyncConnection, None]:
        """Yield a fresh handle, released on every exit path."""
        handle = await self.open()
        try:
            yield handle
        finally:
            await self.close(handle)

    async def ping(self) -> bool:
        """Return True if a session can be opened and queried."""
        async with self.connection() as handle:
            row = await self.query_scalar(handle, "SELECT 1")
        return row is not None and row[0] == 1

    async def dispose(self) -> None:
        """Dispose of the engine."""
        await self._engine.dispose()
