"""Domain entities (cards, history records) and their invariants."""

from .models import Card, CardHistory, CardStatus, InvalidCardError, validate_card

__all__ = ["Card", "CardHistory", "CardStatus", "InvalidCardError", "validate_card"]
