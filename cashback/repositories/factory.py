"""
Build a storage backend from a storage-kind tag.

Each kind lives in its own subdirectory of the data root::

    <data_dir>/SQLite/cashback.db
    <data_dir>/JSON/cards.json, card_history.json
    <data_dir>/XML/cards.xml, card_history.xml
"""
from __future__ import annotations

from pathlib import Path

from cashback.core.config import ConfigurationError, get_settings
from cashback.repositories.base import CardRepository, StorageKind
from cashback.repositories.json_storage import JSONCardRepository
from cashback.repositories.sql_repository import SQLCardRepository
from cashback.repositories.xml_storage import XMLCardRepository

SUBDIRS = {
    StorageKind.SQLITE: "SQLite",
    StorageKind.JSON: "JSON",
    StorageKind.XML: "XML",
}
SQLITE_FILENAME = "cashback.db"

# Registry of available backends
_BACKENDS: dict[StorageKind, type[CardRepository]] = {
    StorageKind.SQLITE: SQLCardRepository,
    StorageKind.JSON: JSONCardRepository,
    StorageKind.XML: XMLCardRepository,
}

_ALIASES = {
    "sqlite": StorageKind.SQLITE,
    "sql": StorageKind.SQLITE,
    "json": StorageKind.JSON,
    "xml": StorageKind.XML,
}


def parse_storage_kind(value: StorageKind | str | None) -> StorageKind:
    """Accept a StorageKind, its name or its tag (case-insensitive)."""
    if isinstance(value, StorageKind):
        return value
    tag = (value or "").strip().lower()
    for kind in StorageKind:
        if tag in (kind.name.lower(), kind.value):
            return kind
    if tag in _ALIASES:
        return _ALIASES[tag]
    raise ConfigurationError(f"Unknown storage kind: {value!r}")


def storage_dir(kind: StorageKind, data_dir: Path | str | None = None) -> Path:
    root = Path(data_dir) if data_dir is not None else get_settings().data_dir
    return root / SUBDIRS[kind]


def create_repository(kind: StorageKind | str, data_dir: Path | str | None = None) -> CardRepository:
    """Return a fresh backend of ``kind``; nothing is cached between calls."""
    kind = parse_storage_kind(kind)
    directory = storage_dir(kind, data_dir)
    backend = _BACKENDS[kind]
    if backend is SQLCardRepository:
        return backend(directory / SQLITE_FILENAME)
    return backend(directory)
