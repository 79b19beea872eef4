"""Centralized SQLAlchemy engine/session helpers for the workspace.

Usage
-----
from db.client import get_engine, session_scope

with session_scope(database_url=url) as s:
    s.execute(...)

Engines are cached per database URL. Schema creation is lazy: the first
engine built for a URL runs ``create_all`` for the storage tables, so a fresh
SQLite file is usable without a separate migration step.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from .models.ledger import Base

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///./.ledger/ledger.db"

_ENGINES: dict[str, Engine] = {}
_SESSION_MAKERS: dict[str, sessionmaker[Session]] = {}


def _database_url(override: str | None = None) -> str:
    url = override or os.getenv("LEDGER_DATABASE_URL")
    if url and url.strip():
        return url.strip()
    return DEFAULT_DATABASE_URL


def _ensure_sqlite_parent(url: str) -> None:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return
    database = parsed.database
    if not database or database == ":memory:":
        return
    Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)


def get_engine(*, database_url: str | None = None) -> Engine:
    """Return the shared engine for ``database_url``, creating it on first use."""

    url = _database_url(database_url)
    engine = _ENGINES.get(url)
    if engine is not None:
        return engine

    _ensure_sqlite_parent(url)
    engine = create_engine(url, pool_pre_ping=True)
    Base.metadata.create_all(bind=engine)
    _ENGINES[url] = engine
    _SESSION_MAKERS[url] = sessionmaker(bind=engine, expire_on_commit=False, class_=Session)
    return engine


def get_session(*, database_url: str | None = None) -> Session:
    """Return a new SQLAlchemy session bound to the shared engine."""

    get_engine(database_url=database_url)
    return _SESSION_MAKERS[_database_url(database_url)]()


@contextmanager
def session_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""

    session = get_session(database_url=database_url)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def dispose_engines() -> None:
    """Dispose every cached engine (used by tests between isolated databases)."""

    for engine in _ENGINES.values():
        engine.dispose()
    _ENGINES.clear()
    _SESSION_MAKERS.clear()


__all__ = [
    "DEFAULT_DATABASE_URL",
    "dispose_engines",
    "get_engine",
    "get_session",
    "session_scope",
]
