"""SQLAlchemy models for the relational card store."""
from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
)

from .session import Base


class CardRow(Base):
    __tablename__ = "cards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bank_name = Column(String(255), nullable=False)
    card_name = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False)
    cashback = Column(Float, nullable=False)
    category_change_date = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)


class CardHistoryRow(Base):
    __tablename__ = "card_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # no relationship/cascade: history outlives a deleted card
    card_id = Column(Integer, ForeignKey("cards.id"), nullable=False, index=True)
    category = Column(String(255), nullable=False)
    cashback_percentage = Column(Float, nullable=False)
    change_date = Column(Date, nullable=False)
    record_date = Column(DateTime, nullable=False)
