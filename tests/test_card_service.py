from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest

from conftest import close_repository, make_card

from cashback.core.config import ConfigurationError
from cashback.domain.models import CardStatus, InvalidCardError
from cashback.repositories.base import CardRepository, StorageError, StorageKind
from cashback.repositories.factory import create_repository
from cashback.services.card_service import CardService


@pytest.fixture()
def mock_repo():
    return MagicMock(spec=CardRepository)


@pytest.fixture()
def service(tmp_path):
    """Service over a real JSON backend, able to switch kinds under tmp_path."""
    svc = CardService(create_repository(StorageKind.JSON, tmp_path), data_dir=tmp_path)
    yield svc
    close_repository(svc.repository)


def test_crud_calls_are_passed_through(mock_repo):
    svc = CardService(mock_repo)
    card = make_card()

    svc.add_card(card)
    svc.update_card(card)
    svc.delete_card(7)
    svc.get_all_cards()
    svc.get_card(7)
    svc.get_expiring_cards(date(2026, 10, 19))
    svc.get_card_history(7)

    mock_repo.save_card.assert_called_once_with(card)
    mock_repo.update_card.assert_called_once_with(card)
    mock_repo.delete_card.assert_called_once_with(7)
    mock_repo.get_all_cards.assert_called_once_with()
    mock_repo.get_card_by_id.assert_called_once_with(7)
    mock_repo.find_by_expiring_category.assert_called_once_with(date(2026, 10, 19))
    mock_repo.find_history_by_card_id.assert_called_once_with(7)


@pytest.mark.parametrize(
    "changes",
    [
        {"cashback": 150.0},
        {"cashback": -1.0},
        {"bank_name": "  "},
        {"category": ""},
        {"category": "Tab\x0bBad"},
        {"card_name": "Nul\x00"},
    ],
)
def test_invalid_cards_never_reach_storage(mock_repo, changes):
    card = make_card()
    for attr, value in changes.items():
        setattr(card, attr, value)

    with pytest.raises(InvalidCardError):
        CardService(mock_repo).add_card(card)
    mock_repo.save_card.assert_not_called()


def test_storage_errors_propagate_unchanged(mock_repo):
    mock_repo.get_all_cards.side_effect = StorageError("disk gone")
    with pytest.raises(StorageError, match="disk gone"):
        CardService(mock_repo).get_all_cards()


def test_best_card_ignores_expired_cards(mock_repo):
    cards = [
        make_card("Groceries", 5.0, card_name="five"),
        make_card("Groceries", 15.0, card_name="fifteen"),
        make_card("Groceries", 3.0, card_name="three"),
        make_card("Groceries", 50.0, card_name="expired", status=CardStatus.EXPIRED),
    ]
    mock_repo.find_by_category.return_value = cards

    best = CardService(mock_repo).find_best_card_for_category("Groceries")

    assert best.card_name == "fifteen"
    mock_repo.find_by_category.assert_called_once_with("Groceries")


def test_best_card_tie_keeps_first(mock_repo):
    mock_repo.find_by_category.return_value = [
        make_card("Fuel", 4.0, card_name="first"),
        make_card("Fuel", 4.0, card_name="second"),
    ]
    assert CardService(mock_repo).find_best_card_for_category("Fuel").card_name == "first"


def test_best_card_none_found(mock_repo):
    svc = CardService(mock_repo)
    mock_repo.find_by_category.return_value = []
    assert svc.find_best_card_for_category("Pharmacy") is None

    mock_repo.find_by_category.return_value = [make_card("Pharmacy", 9.0, status=CardStatus.EXPIRED)]
    assert svc.find_best_card_for_category("Pharmacy") is None


def test_best_card_matches_category_case_insensitively(service):
    service.add_card(make_card("Groceries", 5.0))
    best = service.add_card(make_card("groceries", 6.0))

    assert service.find_best_card_for_category("GROCERIES").id == best.id


def test_expire_cards_flips_status_without_history(service):
    today = date(2026, 10, 19)
    due = service.add_card(make_card("Travel", 4.0, change_date=today - timedelta(days=3)))
    later = service.add_card(make_card("Fuel", 2.0, change_date=today + timedelta(days=30)))

    expired = service.expire_cards(today)

    assert [c.id for c in expired] == [due.id]
    assert service.get_card(due.id).status == CardStatus.EXPIRED
    assert service.get_card(later.id).status == CardStatus.ACTIVE
    assert len(service.get_card_history(due.id)) == 1
    assert service.expire_cards(today) == []


def test_switch_storage_isolates_and_preserves_data(service):
    json_card = service.add_card(make_card("Groceries", 5.0))

    assert service.switch_storage("sqlite") is StorageKind.SQLITE
    try:
        assert service.get_all_cards() == []
        service.add_card(make_card("Travel", 1.0))
    finally:
        close_repository(service.repository)

    service.switch_storage(StorageKind.XML)
    assert service.get_all_cards() == []

    service.switch_storage("JSON")
    assert service.storage_kind is StorageKind.JSON
    assert service.get_all_cards() == [json_card]


def test_switch_to_unknown_kind_keeps_current_backend(service):
    current = service.repository
    with pytest.raises(ConfigurationError):
        service.switch_storage("postgres")
    assert service.repository is current


def test_filters_and_distinct_values(service):
    service.add_card(make_card("Groceries", 5.0, bank_name="Alpha"))
    service.add_card(make_card("Travel", 3.0, bank_name="Beta"))
    service.add_card(make_card("Groceries", 1.0, bank_name="Beta", status=CardStatus.EXPIRED))

    assert len(service.filter_cards(bank_name="Beta")) == 2
    assert len(service.filter_cards(category="Groceries", status="active")) == 1
    assert len(service.filter_cards(status=CardStatus.EXPIRED)) == 1
    assert len(service.filter_cards()) == 3
    assert service.list_banks() == ["Alpha", "Beta"]
    assert service.list_categories() == ["Groceries", "Travel"]


def test_from_settings_falls_back_to_sqlite(settings_env, monkeypatch):
    monkeypatch.setenv("CASHBACK_STORAGE", "mainframe")

    svc = CardService.from_settings()
    try:
        assert svc.storage_kind is StorageKind.SQLITE
        assert (settings_env / "SQLite" / "cashback.db").exists()
    finally:
        close_repository(svc.repository)


def test_from_settings_uses_configured_kind(settings_env, monkeypatch):
    monkeypatch.setenv("CASHBACK_STORAGE", "markup-file")

    svc = CardService.from_settings()

    assert svc.storage_kind is StorageKind.XML
    assert (settings_env / "XML" / "cards.xml").exists()


def _held_elsewhere(lock) -> bool:
    """True when another thread cannot take ``lock`` right now."""
    acquired = []

    def try_lock():
        if lock.acquire(blocking=False):
            lock.release()
            acquired.append(True)
        else:
            acquired.append(False)

    worker = threading.Thread(target=try_lock)
    worker.start()
    worker.join()
    return not acquired[0]


def test_mutations_run_under_the_service_lock(mock_repo):
    svc = CardService(mock_repo)
    seen = []

    def record(*args, **kwargs):
        seen.append(_held_elsewhere(svc._lock))
        return args[0] if args else None

    mock_repo.save_card.side_effect = record
    mock_repo.delete_card.side_effect = record
    mock_repo.update_card.side_effect = record
    mock_repo.find_by_expiring_category.return_value = [replace(make_card(), id=1)]

    svc.add_card(make_card())
    svc.delete_card(1)
    svc.expire_cards(date(2026, 10, 19))

    assert seen == [True, True, True]


def test_concurrent_adds_get_unique_ids(service):
    def add_many(worker):
        for i in range(10):
            service.add_card(make_card(f"Cat {worker}-{i}", 1.0))

    threads = [threading.Thread(target=add_many, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    reloaded = create_repository(StorageKind.JSON, service.data_dir).get_all_cards()
    assert len(reloaded) == 80
    assert len({c.id for c in reloaded}) == 80


def test_expire_cards_does_not_revalidate_stored_cards(mock_repo):
    out_of_range = replace(make_card("Travel", 150.0), id=1)
    normal = replace(make_card("Fuel", 2.0), id=2)
    mock_repo.find_by_expiring_category.return_value = [out_of_range, normal]

    expired = CardService(mock_repo).expire_cards(date(2026, 10, 19))

    assert [c.id for c in expired] == [1, 2]
    assert all(c.status == CardStatus.EXPIRED for c in expired)
    assert mock_repo.update_card.call_count == 2
