# src/storage/database.py
from __future__ import annotations

import os

from sqlalchemy import create_engine, Engine

_engine: Engine | None = None


def get_database_url() -> str:
    url = os.environ.get("DATABASE_URL", "sqlite:///storefront.db")
    # Railway/Heroku use postgres:// but SQLAlchemy needs postgresql://
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        url = get_database_url()
        kwargs: dict = {"echo": os.environ.get("SQL_ECHO", "").lower() == "true"}
        if url.startswith("postgresql"):
            kwargs["pool_size"] = 5
            kwargs["pool_pre_ping"] = True
        _engine = create_engine(url, **kwargs)
    return _engine


def reset_engine() -> None:
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None
