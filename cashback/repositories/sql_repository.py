"""Relational card store backed by SQLAlchemy (SQLite file by default)."""
from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cashback.core.logging_config import get_logger
from cashback.db.create_tables import create_all
from cashback.db.models import CardHistoryRow, CardRow
from cashback.db.session import get_session, sqlite_url
from cashback.domain.models import Card, CardHistory, CardStatus, same_category
from cashback.repositories.base import CardRepository, StorageError, StorageKind

logger = get_logger(__name__)


def _row_to_card(row: CardRow) -> Card:
    return Card(
        id=row.id,
        bank_name=row.bank_name,
        card_name=row.card_name,
        category=row.category,
        cashback=row.cashback,
        category_change_date=row.category_change_date,
        status=CardStatus.ACTIVE if row.is_active else CardStatus.EXPIRED,
    )


def _row_to_history(row: CardHistoryRow) -> CardHistory:
    return CardHistory(
        id=row.id,
        card_id=row.card_id,
        category=row.category,
        cashback_percentage=row.cashback_percentage,
        change_date=row.change_date,
        record_date=row.record_date,
    )


def _card_values(card: Card) -> dict:
    return {
        "bank_name": card.bank_name,
        "card_name": card.card_name,
        "category": card.category,
        "cashback": card.cashback,
        "category_change_date": card.category_change_date,
        "is_active": card.is_active,
    }


class SQLCardRepository(CardRepository):
    """CRUD helpers wrapping one SQLAlchemy session per call."""

    kind = StorageKind.SQLITE

    def __init__(self, db_path: Path | str | None = None, *, url: str | None = None) -> None:
        if url is None:
            if db_path is None:
                raise ValueError("db_path or url is required")
            db_path = Path(db_path)
            try:
                db_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StorageError(f"Cannot create database directory {db_path.parent}") from exc
            url = sqlite_url(db_path)
        self.url = url
        try:
            create_all(self.url)
        except SQLAlchemyError as exc:
            raise StorageError("Failed to initialize the card database") from exc

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        try:
            with get_session(self.url) as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("sql_operation_failed", action=action, error=str(exc))
            raise StorageError(f"Database error while trying to {action}") from exc
        except (TypeError, ValueError) as exc:
            # malformed values stored in a row (e.g. unparsable dates)
            logger.error("sql_malformed_data", action=action, error=str(exc))
            raise StorageError(f"Malformed data while trying to {action}") from exc

    # -------------------------- cards --------------------------
    def save_card(self, card: Card) -> Card:
        with self._session("save card") as session:
            row = CardRow(**_card_values(card))
            session.add(row)
            session.commit()
            card.id = row.id
        logger.info("card_saved", backend="sqlite", card_id=card.id)
        self.save_history(CardHistory.from_card(card))
        return card

    def update_card(self, card: Card) -> Card:
        if card.id is None:
            return self.save_card(card)
        old = self.get_card_by_id(card.id)
        if old is not None and not old.same_terms(card):
            self.save_history(CardHistory.from_card(card))
        with self._session("update card") as session:
            session.merge(CardRow(id=card.id, **_card_values(card)))
            session.commit()
        logger.info("card_updated", backend="sqlite", card_id=card.id, existed=old is not None)
        return card

    def delete_card(self, card_id: int) -> None:
        with self._session("delete card") as session:
            session.execute(delete(CardRow).where(CardRow.id == card_id))
            session.commit()
        logger.info("card_deleted", backend="sqlite", card_id=card_id)

    def get_all_cards(self) -> list[Card]:
        with self._session("list cards") as session:
            rows = session.execute(select(CardRow).order_by(CardRow.id)).scalars().all()
            return [_row_to_card(row) for row in rows]

    def get_card_by_id(self, card_id: int) -> Optional[Card]:
        with self._session("load card") as session:
            row = session.get(CardRow, card_id)
            return _row_to_card(row) if row else None

    # -------------------------- history --------------------------
    def save_history(self, record: CardHistory) -> CardHistory:
        if record.record_date is None:
            record.record_date = datetime.now()
        with self._session("save history") as session:
            row = CardHistoryRow(
                card_id=record.card_id,
                category=record.category,
                cashback_percentage=record.cashback_percentage,
                change_date=record.change_date,
                record_date=record.record_date,
            )
            session.add(row)
            session.commit()
            record.id = row.id
        logger.info("history_appended", backend="sqlite", card_id=record.card_id, history_id=record.id)
        return record

    def find_history_by_card_id(self, card_id: int) -> list[CardHistory]:
        with self._session("load card history") as session:
            stmt = (
                select(CardHistoryRow)
                .where(CardHistoryRow.card_id == card_id)
                .order_by(CardHistoryRow.record_date.desc(), CardHistoryRow.id.desc())
            )
            return [_row_to_history(row) for row in session.execute(stmt).scalars().all()]

    # -------------------------- queries --------------------------
    def find_by_category(self, category: str) -> list[Card]:
        # SQLite's lower() only folds ASCII, so the match is done here
        return [card for card in self.get_all_cards() if same_category(card.category, category)]

    def find_by_expiring_category(self, on_date: date) -> list[Card]:
        with self._session("find expiring cards") as session:
            stmt = (
                select(CardRow)
                .where(CardRow.category_change_date <= on_date)
                .where(CardRow.is_active.is_(True))
                .order_by(CardRow.id)
            )
            return [_row_to_card(row) for row in session.execute(stmt).scalars().all()]
