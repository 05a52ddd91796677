"""Create the relational schema (idempotent)."""
from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from .session import Base, get_engine, sqlite_url
from . import models  # noqa: F401  # ensure models are imported for metadata


def create_all(url: str) -> None:
    engine = get_engine(url)
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    from cashback.core.config import get_settings

    db_path = get_settings().data_dir / "SQLite" / "cashback.db"
    db_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        create_all(sqlite_url(db_path))
        print(f"Database tables created successfully in {db_path}.")
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
