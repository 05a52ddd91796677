"""
Request/response models for the HTTP surface.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from cashback.domain.models import Card, CardHistory, CardStatus


class CardIn(BaseModel):
    """Card fields accepted on create/update."""

    bank_name: str = Field(..., min_length=1, description="Issuing bank")
    card_name: str = Field(..., min_length=1, description="Card name")
    category: str = Field(..., min_length=1, description="Current cashback category")
    cashback: float = Field(..., ge=0, le=100, description="Cashback rate, percent")
    category_change_date: date = Field(..., description="When the category was set / must be reconsidered")
    status: CardStatus = Field(default=CardStatus.ACTIVE)

    def to_card(self, card_id: Optional[int] = None) -> Card:
        return Card(
            id=card_id,
            bank_name=self.bank_name,
            card_name=self.card_name,
            category=self.category,
            cashback=self.cashback,
            category_change_date=self.category_change_date,
            status=self.status,
        )


class CardOut(CardIn):
    id: int

    @classmethod
    def from_card(cls, card: Card) -> "CardOut":
        return cls(
            id=card.id,
            bank_name=card.bank_name,
            card_name=card.card_name,
            category=card.category,
            cashback=card.cashback,
            category_change_date=card.category_change_date,
            status=card.status,
        )


class CardHistoryOut(BaseModel):
    id: Optional[int] = None
    card_id: int
    category: str
    cashback_percentage: float
    change_date: date
    record_date: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: CardHistory) -> "CardHistoryOut":
        return cls(
            id=record.id,
            card_id=record.card_id,
            category=record.category,
            cashback_percentage=record.cashback_percentage,
            change_date=record.change_date,
            record_date=record.record_date,
        )


class StorageSelection(BaseModel):
    kind: str = Field(..., description="sqlite/json/xml or relational/structured-file/markup-file")
