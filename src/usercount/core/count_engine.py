"""Count engine: row counts over a named table."""

from __future__ import annotations

import logging
import re

from usercount.core.exceptions import QueryError
from usercount.db.engine import SQLiteStorage
from usercount.db.models import USER_TABLE

logger = logging.getLogger(__name__)

# Interpolated into SQL, never bound: plain identifiers only.
_COLLECTION_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

INVALID_COLLECTION_ERROR = "Invalid collection name."
EMPTY_COUNT_ERROR = "Count query returned no rows."


class CountEngine:
    """Aggregate counts backed by one connection per call."""

    def __init__(self, storage: SQLiteStorage) -> None:
        self._storage = storage

    async def count_records(self, collection_name: str) -> int:
        """Return the number of rows in ``collection_name``.

        Opens a connection, runs ``SELECT COUNT(*)``, and releases the
        connection before returning on every path.

        Raises:
            StorageConnectionError: the database could not be opened.
            QueryError: the name is not an identifier or the query failed.
        """
        if not _COLLECTION_NAME_PATTERN.fullmatch(collection_name):
            raise QueryError(INVALID_COLLECTION_ERROR)

        statement = f'SELECT COUNT(*) AS count FROM "{collection_name}"'
        async with self._storage.connection() as handle:
            row = await self._storage.query_scalar(handle, statement)

        if row is None:
            raise QueryError(EMPTY_COUNT_ERROR)
        total = int(row[0])
        logger.debug("Counted %d rows in %s", total, collection_name)
        return total

    async def count_users(self) -> int:
        """Number of rows in the user table."""
        return await self.count_records(USER_TABLE)
