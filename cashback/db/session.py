"""Engine/session helpers for the SQL backend."""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


def sqlite_url(db_path: Path | str) -> str:
    return f"sqlite:///{Path(db_path)}"


@lru_cache
def get_engine(url: str) -> Engine:
    if not (url or "").strip():
        raise RuntimeError("A database URL is required to use the SQL backend.")
    return create_engine(url, future=True, pool_pre_ping=True)


@lru_cache
def _get_sessionmaker(url: str):
    return sessionmaker(
        bind=get_engine(url),
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


@contextmanager
def get_session(url: str) -> Session:
    session: Session = _get_sessionmaker(url)()
    try:
        yield session
    finally:
        session.close()


def dispose_engine(url: str) -> None:
    """Close pooled connections for ``url`` and drop the cached engine/sessionmaker."""
    get_engine(url).dispose()
    get_engine.cache_clear()
    _get_sessionmaker.cache_clear()
