from __future__ import annotations

import pytest

from conftest import close_repository

from cashback.core import config as core_config
from cashback.core.config import ConfigurationError
from cashback.repositories.base import StorageKind
from cashback.repositories.factory import create_repository, parse_storage_kind
from cashback.repositories.json_storage import JSONCardRepository
from cashback.repositories.sql_repository import SQLCardRepository
from cashback.repositories.xml_storage import XMLCardRepository


@pytest.mark.parametrize(
    "tag, expected",
    [
        ("relational", StorageKind.SQLITE),
        ("SQLITE", StorageKind.SQLITE),
        ("Structured-File", StorageKind.JSON),
        ("json", StorageKind.JSON),
        (" MARKUP-FILE ", StorageKind.XML),
        ("Xml", StorageKind.XML),
        (StorageKind.XML, StorageKind.XML),
    ],
)
def test_parse_storage_kind(tag, expected):
    assert parse_storage_kind(tag) is expected


@pytest.mark.parametrize("tag", ["", None, "csv", "postgres"])
def test_unknown_kind_is_a_configuration_error(tag):
    with pytest.raises(ConfigurationError):
        parse_storage_kind(tag)


def test_each_kind_gets_its_own_subdirectory(tmp_path):
    sql = create_repository("sqlite", tmp_path)
    try:
        assert isinstance(sql, SQLCardRepository)
        assert (tmp_path / "SQLite" / "cashback.db").exists()
    finally:
        close_repository(sql)

    json_repo = create_repository("json", tmp_path)
    assert isinstance(json_repo, JSONCardRepository)
    assert json_repo.cards_file == tmp_path / "JSON" / "cards.json"
    assert json_repo.history_file == tmp_path / "JSON" / "card_history.json"

    xml_repo = create_repository("xml", tmp_path)
    assert isinstance(xml_repo, XMLCardRepository)
    assert xml_repo.cards_file == tmp_path / "XML" / "cards.xml"
    assert xml_repo.history_file == tmp_path / "XML" / "card_history.xml"


def test_instances_are_not_cached(tmp_path):
    assert create_repository("json", tmp_path) is not create_repository("json", tmp_path)


def test_default_data_dir_comes_from_settings(settings_env):
    repo = create_repository(StorageKind.JSON)
    assert repo.directory == settings_env / "JSON"


def test_settings_read_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("CASHBACK_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CASHBACK_STORAGE", "xml")
    monkeypatch.setenv("CASHBACK_LOG_LEVEL", "debug")
    monkeypatch.setenv("CASHBACK_LOG_JSON", "yes")
    core_config.get_settings.cache_clear()
    try:
        settings = core_config.get_settings()
        assert settings.data_dir == tmp_path
        assert settings.storage_kind == "xml"
        assert settings.log_level == "DEBUG"
        assert settings.log_json is True
    finally:
        core_config.get_settings.cache_clear()
