"""
Card use cases layered over one active storage backend.
"""

from __future__ import annotations

import threading
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from cashback.core.config import ConfigurationError, get_settings
from cashback.core.logging_config import get_logger
from cashback.domain.models import Card, CardHistory, CardStatus, validate_card
from cashback.repositories.base import CardRepository, StorageKind
from cashback.repositories.factory import create_repository, parse_storage_kind

logger = get_logger(__name__)

DEFAULT_STORAGE_KIND = StorageKind.SQLITE


class CardService:
    """Passthrough CRUD plus best-card and expiry queries; one backend at a time."""

    def __init__(
        self,
        repository: CardRepository,
        *,
        data_dir: Path | str | None = None,
        repository_factory: Callable[..., CardRepository] = create_repository,
    ) -> None:
        self.repository = repository
        self.data_dir = data_dir
        self._factory = repository_factory
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls) -> "CardService":
        """Build a service for the configured storage kind, falling back to SQLite."""
        settings = get_settings()
        try:
            kind = parse_storage_kind(settings.storage_kind)
        except ConfigurationError:
            logger.warning(
                "invalid_storage_kind",
                configured=settings.storage_kind,
                fallback=DEFAULT_STORAGE_KIND.value,
            )
            kind = DEFAULT_STORAGE_KIND
        return cls(create_repository(kind, settings.data_dir), data_dir=settings.data_dir)

    @property
    def storage_kind(self) -> Optional[StorageKind]:
        return getattr(self.repository, "kind", None)

    def switch_storage(self, kind: StorageKind | str) -> StorageKind:
        """Point the service at another backend; nothing is copied or deleted."""
        kind = parse_storage_kind(kind)
        with self._lock:
            previous = self.storage_kind
            self.repository = self._factory(kind, self.data_dir)
        logger.info("storage_switched", previous=getattr(previous, "value", None), current=kind.value)
        return kind

    # -------------------------- CRUD --------------------------
    def add_card(self, card: Card) -> Card:
        validate_card(card)
        with self._lock:
            return self.repository.save_card(card)

    def update_card(self, card: Card) -> Card:
        validate_card(card)
        with self._lock:
            return self.repository.update_card(card)

    def delete_card(self, card_id: int) -> None:
        with self._lock:
            self.repository.delete_card(card_id)

    def get_all_cards(self) -> list[Card]:
        return self.repository.get_all_cards()

    def get_card(self, card_id: int) -> Optional[Card]:
        return self.repository.get_card_by_id(card_id)

    # -------------------------- queries --------------------------
    def get_expiring_cards(self, on_date: date) -> list[Card]:
        return self.repository.find_by_expiring_category(on_date)

    def get_card_history(self, card_id: int) -> list[CardHistory]:
        return self.repository.find_history_by_card_id(card_id)

    def find_best_card_for_category(self, category: str) -> Optional[Card]:
        """Active card with the highest rate for ``category`` (first one wins a tie)."""
        best: Optional[Card] = None
        for card in self.repository.find_by_category(category):
            if not card.is_active:
                continue
            if best is None or card.cashback > best.cashback:
                best = card
        return best

    def expire_cards(self, on_date: Optional[date] = None) -> list[Card]:
        """Mark every expiring card as EXPIRED and return them.

        Only the status changes, so stored cards are not validated again.
        """
        on_date = on_date or date.today()
        expired = []
        with self._lock:
            for card in self.get_expiring_cards(on_date):
                card.status = CardStatus.EXPIRED
                self.repository.update_card(card)
                expired.append(card)
        if expired:
            logger.info("cards_expired", on_date=on_date.isoformat(), card_ids=[c.id for c in expired])
        return expired

    def filter_cards(
        self,
        bank_name: Optional[str] = None,
        category: Optional[str] = None,
        status: CardStatus | str | None = None,
    ) -> list[Card]:
        cards = self.get_all_cards()
        if bank_name:
            cards = [c for c in cards if c.bank_name == bank_name]
        if category:
            cards = [c for c in cards if c.category == category]
        if status:
            wanted = status if isinstance(status, CardStatus) else CardStatus(str(status).upper())
            cards = [c for c in cards if c.status == wanted]
        return cards

    def list_banks(self) -> list[str]:
        return list(dict.fromkeys(c.bank_name for c in self.get_all_cards()))

    def list_categories(self) -> list[str]:
        return list(dict.fromkeys(c.category for c in self.get_all_cards()))
