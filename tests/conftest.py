from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import pytest

# make the cashback package importable when running from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cashback.core import config as core_config  # noqa: E402
from cashback.db.session import dispose_engine  # noqa: E402
from cashback.domain.models import Card, CardStatus  # noqa: E402
from cashback.repositories.factory import create_repository  # noqa: E402
from cashback.repositories.sql_repository import SQLCardRepository  # noqa: E402


def make_card(
    category: str = "Groceries",
    cashback: float = 5.0,
    *,
    bank_name: str = "Test Bank",
    card_name: str = "Test Card",
    change_date: date = date(2026, 12, 1),
    status: CardStatus = CardStatus.ACTIVE,
) -> Card:
    return Card(
        bank_name=bank_name,
        card_name=card_name,
        category=category,
        cashback=cashback,
        category_change_date=change_date,
        status=status,
    )


def close_repository(repo) -> None:
    """Dispose SQLite engines so the temp file is not left locked (Windows)."""
    if isinstance(repo, SQLCardRepository):
        dispose_engine(repo.url)


@pytest.fixture(params=["sqlite", "json", "xml"])
def repo(request, tmp_path):
    """One fresh backend of every kind under a temporary data root."""
    repository = create_repository(request.param, tmp_path)
    yield repository
    close_repository(repository)


@pytest.fixture()
def settings_env(tmp_path, monkeypatch):
    """Point the settings at a temporary data root and reset the cache."""
    monkeypatch.setenv("CASHBACK_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("CASHBACK_STORAGE", raising=False)
    core_config.get_settings.cache_clear()
    yield tmp_path
    core_config.get_settings.cache_clear()
