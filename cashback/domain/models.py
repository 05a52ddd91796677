"""
Data model for tracked cards and their cashback history.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional

# characters XML 1.0 cannot carry, not even as character references
_UNSTORABLE_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


class InvalidCardError(ValueError):
    """Raised when a card violates the data-model invariants."""


class CardStatus(str, Enum):
    """Whether the card's current cashback category is still valid."""

    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


@dataclass
class Card:
    """Bank card with its current cashback category and rate."""

    bank_name: str
    card_name: str
    category: str
    cashback: float  # percent, 0..100
    category_change_date: date
    status: CardStatus = CardStatus.ACTIVE
    id: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.status, CardStatus):
            self.status = CardStatus(str(self.status).upper())
        self.cashback = float(self.cashback)

    @property
    def is_active(self) -> bool:
        return self.status == CardStatus.ACTIVE

    def same_terms(self, other: "Card") -> bool:
        """True when category and rate are identical to ``other``'s."""
        return self.category == other.category and self.cashback == other.cashback


@dataclass
class CardHistory:
    """Immutable snapshot of a card's category/rate at some point in time."""

    card_id: int
    category: str
    cashback_percentage: float
    change_date: date
    record_date: Optional[datetime] = None
    id: Optional[int] = None

    @classmethod
    def from_card(cls, card: Card, recorded_at: Optional[datetime] = None) -> "CardHistory":
        return cls(
            card_id=card.id,
            category=card.category,
            cashback_percentage=card.cashback,
            change_date=card.category_change_date,
            record_date=recorded_at or datetime.now(),
        )


def validate_card(card: Card) -> Card:
    """Check names, category, rate range and change date; return the card untouched."""
    for attr in ("bank_name", "card_name", "category"):
        value = getattr(card, attr)
        if not isinstance(value, str) or not value.strip():
            raise InvalidCardError(f"{attr} must not be empty")
        if has_unstorable_chars(value):
            raise InvalidCardError(f"{attr} contains control characters")
    if not 0 <= card.cashback <= 100:
        raise InvalidCardError("cashback must be between 0 and 100")
    if not isinstance(card.category_change_date, date):
        raise InvalidCardError("category_change_date must be a date")
    return card


def has_unstorable_chars(text: str) -> bool:
    return _UNSTORABLE_CHARS.search(text) is not None


def same_category(left: str, right: str) -> bool:
    """Case-insensitive category comparison (Unicode aware)."""
    return (left or "").casefold() == (right or "").casefold()


def history_sort_key(record: CardHistory) -> tuple:
    """Sort key for newest-first history listings (record date, then id).

    Naive and timezone-aware stamps are compared as POSIX timestamps; a naive
    stamp is read as local time.
    """
    stamp = record.record_date.timestamp() if record.record_date else float("-inf")
    return (stamp, record.id or 0)


__all__ = [
    "Card",
    "CardHistory",
    "CardStatus",
    "InvalidCardError",
    "has_unstorable_chars",
    "history_sort_key",
    "same_category",
    "validate_card",
]
