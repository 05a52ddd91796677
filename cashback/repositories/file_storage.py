"""
Whole-file persistence shared by the JSON and XML backends.

Both collections (cards and history) are held in memory and every mutating
call rewrites the corresponding file in full. Subclasses only decide how a
list of plain records is turned into text and back.
"""
from __future__ import annotations

import os
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Optional

from cashback.core.logging_config import get_logger
from cashback.domain.models import (
    Card,
    CardHistory,
    history_sort_key,
    same_category,
)
from cashback.repositories.base import CardRepository, StorageError

logger = get_logger(__name__)


class CorruptFileError(ValueError):
    """Raised by decoders when a file's content cannot be parsed."""


def card_to_record(card: Card) -> dict[str, Any]:
    return {
        "id": card.id,
        "bank_name": card.bank_name,
        "card_name": card.card_name,
        "category": card.category,
        "cashback": card.cashback,
        "category_change_date": card.category_change_date.isoformat(),
        "status": card.status.value,
    }


def card_from_record(data: dict[str, Any]) -> Card:
    return Card(
        id=int(data["id"]),
        bank_name=str(data["bank_name"]),
        card_name=str(data["card_name"]),
        category=str(data["category"]),
        cashback=float(data["cashback"]),
        category_change_date=date.fromisoformat(str(data["category_change_date"])),
        status=data.get("status") or "ACTIVE",
    )


def history_to_record(record: CardHistory) -> dict[str, Any]:
    return {
        "id": record.id,
        "card_id": record.card_id,
        "category": record.category,
        "cashback_percentage": record.cashback_percentage,
        "change_date": record.change_date.isoformat(),
        "record_date": record.record_date.isoformat() if record.record_date else None,
    }


def history_from_record(data: dict[str, Any]) -> CardHistory:
    record_date = data.get("record_date")
    return CardHistory(
        id=int(data["id"]) if data.get("id") is not None else None,
        card_id=int(data["card_id"]),
        category=str(data["category"]),
        cashback_percentage=float(data["cashback_percentage"]),
        change_date=date.fromisoformat(str(data["change_date"])),
        record_date=datetime.fromisoformat(str(record_date)) if record_date else None,
    )


class FileCardRepository(CardRepository):
    """In-memory collections mirrored to two files, rewritten on every change."""

    suffix = ""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)
        self.cards_file = self.directory / f"cards{self.suffix}"
        self.history_file = self.directory / f"card_history{self.suffix}"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create storage directory {self.directory}") from exc

        self._cards: list[Card] = self._load(self.cards_file, "cards", card_from_record)
        self._history: list[CardHistory] = self._load(self.history_file, "history", history_from_record)
        self._next_card_id = max((c.id for c in self._cards), default=0) + 1
        self._next_history_id = max((h.id or 0 for h in self._history), default=0) + 1

    # -------------------------- format hooks --------------------------
    def encode(self, collection: str, records: list[dict[str, Any]]) -> str:
        raise NotImplementedError

    def decode(self, collection: str, text: str) -> list[dict[str, Any]]:
        raise NotImplementedError

    # -------------------------- file I/O --------------------------
    def _load(self, path: Path, collection: str, convert: Callable[[dict[str, Any]], Any]) -> list:
        try:
            text = path.read_text(encoding="utf-8") if path.exists() else ""
        except OSError as exc:
            raise StorageError(f"Cannot read {path}") from exc

        if not text.strip():
            self._write(path, collection, [])
            return []
        try:
            return [convert(item) for item in self.decode(collection, text)]
        except (CorruptFileError, KeyError, TypeError, ValueError) as exc:
            backup = path.with_name(path.name + ".corrupt")
            logger.warning("corrupt_file_reset", path=str(path), backup=str(backup), error=str(exc))
            try:
                os.replace(path, backup)
            except OSError as move_exc:
                raise StorageError(f"Cannot move corrupt file {path} aside") from move_exc
            self._write(path, collection, [])
            return []

    def _write(self, path: Path, collection: str, records: list[dict[str, Any]]) -> None:
        tmp = path.with_name(path.name + ".tmp")
        try:
            tmp.write_text(self.encode(collection, records), encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            raise StorageError(f"Cannot write {path}") from exc

    # A mutation writes the new list first and only then replaces the in-memory
    # one, so a failed write leaves both unchanged.
    def _commit_cards(self, cards: list[Card]) -> None:
        self._write(self.cards_file, "cards", [card_to_record(c) for c in cards])
        self._cards = cards

    def _commit_history(self, history: list[CardHistory]) -> None:
        self._write(self.history_file, "history", [history_to_record(h) for h in history])
        self._history = history

    def _index_of(self, card_id: int) -> Optional[int]:
        for idx, card in enumerate(self._cards):
            if card.id == card_id:
                return idx
        return None

    # -------------------------- cards --------------------------
    def save_card(self, card: Card) -> Card:
        card_id = self._next_card_id
        self._commit_cards(self._cards + [replace(card, id=card_id)])
        self._next_card_id += 1
        card.id = card_id
        logger.info("card_saved", backend=self.kind.name.lower(), card_id=card.id)
        self.save_history(CardHistory.from_card(card))
        return card

    def update_card(self, card: Card) -> Card:
        if card.id is None:
            return self.save_card(card)
        idx = self._index_of(card.id)
        cards = list(self._cards)
        if idx is None:
            cards.append(replace(card))
            terms_changed = False
        else:
            cards[idx] = replace(card)
            terms_changed = not self._cards[idx].same_terms(card)
        self._commit_cards(cards)
        if idx is None:
            self._next_card_id = max(self._next_card_id, card.id + 1)
        logger.info("card_updated", backend=self.kind.name.lower(), card_id=card.id, existed=idx is not None)
        if terms_changed:
            self.save_history(CardHistory.from_card(card))
        return card

    def delete_card(self, card_id: int) -> None:
        idx = self._index_of(card_id)
        if idx is None:
            return
        self._commit_cards(self._cards[:idx] + self._cards[idx + 1:])
        logger.info("card_deleted", backend=self.kind.name.lower(), card_id=card_id)

    def get_all_cards(self) -> list[Card]:
        return [replace(card) for card in self._cards]

    def get_card_by_id(self, card_id: int) -> Optional[Card]:
        idx = self._index_of(card_id)
        return replace(self._cards[idx]) if idx is not None else None

    # -------------------------- history --------------------------
    def save_history(self, record: CardHistory) -> CardHistory:
        stored = replace(
            record,
            id=self._next_history_id,
            record_date=record.record_date or datetime.now(),
        )
        self._commit_history(self._history + [stored])
        self._next_history_id += 1
        record.id, record.record_date = stored.id, stored.record_date
        logger.info(
            "history_appended",
            backend=self.kind.name.lower(),
            card_id=record.card_id,
            history_id=record.id,
        )
        return record

    def find_history_by_card_id(self, card_id: int) -> list[CardHistory]:
        records = [replace(h) for h in self._history if h.card_id == card_id]
        records.sort(key=history_sort_key, reverse=True)
        return records

    # -------------------------- queries --------------------------
    def find_by_category(self, category: str) -> list[Card]:
        return [replace(c) for c in self._cards if same_category(c.category, category)]

    def find_by_expiring_category(self, on_date: date) -> list[Card]:
        return [replace(c) for c in self._cards if c.is_active and c.category_change_date <= on_date]
