"""Database layer."""

from usercount.db.engine import SQLiteStorage
from usercount.db.models import USER_TABLE, Base, UserRecord

__all__ = [
    "SQLiteStorage",
    "USER_TABLE",
    "Base",
    "UserRecord",
]
