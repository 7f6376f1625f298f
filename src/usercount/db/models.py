"""SQLAlchemy ORM models for usercount (SQLite backend)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

USER_TABLE = "user_list"


class Base(DeclarativeBase):
    """Base class for all models."""


class UserRecord(Base):
    """A row of the counted user table. Only setup code writes these."""

    __tablename__ = USER_TABLE
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
