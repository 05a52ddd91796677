"""Database helpers (engine/session export)."""

from .session import Base, dispose_engine, get_engine, get_session, sqlite_url

__all__ = ["Base", "dispose_engine", "get_engine", "get_session", "sqlite_url"]
