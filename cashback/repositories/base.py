"""
Storage contract shared by every card backend.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from enum import Enum
from typing import Optional

from cashback.domain.models import Card, CardHistory


class StorageError(RuntimeError):
    """Unrecoverable storage failure (I/O, SQL, malformed relational data)."""


class StorageKind(str, Enum):
    """Available storage backends; the value is the configuration tag."""

    SQLITE = "relational"
    JSON = "structured-file"
    XML = "markup-file"


class CardRepository(ABC):
    """
    Durable CRUD for cards plus an append-only change history.

    Invariants every implementation keeps:
    - ``save_card`` writes exactly one history record with the initial terms.
    - ``update_card`` appends one history record when category or rate
      differ from the stored card, before the new state is persisted; a
      missing id is upserted, never an error.
    - history is never updated or deleted, not even when its card is.
    - category matching is case-insensitive; expiry is "on or before".
    """

    kind: StorageKind

    @abstractmethod
    def save_card(self, card: Card) -> Card:
        """Assign ``card.id``, persist the card and its initial history record."""

    @abstractmethod
    def update_card(self, card: Card) -> Card:
        """Replace the stored card with ``card``, recording changed terms."""

    @abstractmethod
    def delete_card(self, card_id: int) -> None:
        """Remove the card if present; its history stays."""

    @abstractmethod
    def get_all_cards(self) -> list[Card]:
        pass

    @abstractmethod
    def get_card_by_id(self, card_id: int) -> Optional[Card]:
        pass

    @abstractmethod
    def save_history(self, record: CardHistory) -> CardHistory:
        """
        Append a history record and assign its id.

        A caller-supplied ``record_date`` is kept verbatim; ``None`` is
        stamped with the current time.
        """

    @abstractmethod
    def find_history_by_card_id(self, card_id: int) -> list[CardHistory]:
        """History of one card, newest record first."""

    @abstractmethod
    def find_by_category(self, category: str) -> list[Card]:
        pass

    @abstractmethod
    def find_by_expiring_category(self, on_date: date) -> list[Card]:
        """Active cards whose category change date is on or before ``on_date``."""
