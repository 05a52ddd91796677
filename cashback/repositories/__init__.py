"""
Persistence adapters.

Three interchangeable backends (SQLite via SQLAlchemy, JSON files, XML files)
implement the CardRepository contract. Services depend on that contract and
obtain instances through ``create_repository``.
"""

from .base import CardRepository, StorageError, StorageKind
from .factory import create_repository, parse_storage_kind

__all__ = [
    "CardRepository",
    "StorageError",
    "StorageKind",
    "create_repository",
    "parse_storage_kind",
]
