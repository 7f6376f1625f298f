"""FastAPI dependencies resolving the services built by ``create_app``."""

from __future__ import annotations

from fastapi import Request

from usercount.config import Settings
from usercount.core.count_engine import CountEngine
from usercount.db.engine import SQLiteStorage


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> SQLiteStorage:
    return request.app.state.storage


def get_count_engine(request: Request) -> CountEngine:
    return request.app.state.count_engine
