#!/usr/bin/env python3
"""
Register a card in the configured storage backend.

Usage:
  python scripts/add_card.py --bank "Bank" --card "Gold" --category Groceries --cashback 5 \
      --change-date 2026-12-01 [--storage json] [--data-dir data]
"""
from __future__ import annotations

import argparse
import sys
from datetime import date

from cashback.core.config import get_settings
from cashback.core.logging_config import configure_logging
from cashback.domain.models import Card, InvalidCardError
from cashback.repositories.factory import create_repository
from cashback.services.card_service import CardService


def main() -> None:
    ap = argparse.ArgumentParser(description="Add a card to the cashback tracker")
    ap.add_argument("--bank", required=True, help="Bank name")
    ap.add_argument("--card", required=True, help="Card name")
    ap.add_argument("--category", required=True, help="Current cashback category")
    ap.add_argument("--cashback", required=True, type=float, help="Cashback rate, percent (0-100)")
    ap.add_argument("--change-date", required=True, type=date.fromisoformat, help="Category change date (YYYY-MM-DD)")
    ap.add_argument("--storage", help="sqlite/json/xml (default: CASHBACK_STORAGE)")
    ap.add_argument("--data-dir", help="Data root (default: CASHBACK_DATA_DIR)")
    args = ap.parse_args()

    settings = get_settings()
    configure_logging(settings)
    data_dir = args.data_dir or settings.data_dir
    svc = CardService(create_repository(args.storage or settings.storage_kind, data_dir), data_dir=data_dir)

    card = Card(
        bank_name=args.bank.strip(),
        card_name=args.card.strip(),
        category=args.category.strip(),
        cashback=args.cashback,
        category_change_date=args.change_date,
    )
    try:
        svc.add_card(card)
    except InvalidCardError as exc:
        raise SystemExit(f"Invalid card: {exc}")

    print("OK: card added")
    print(f"  ID: {card.id}")
    print(f"  {card.bank_name} {card.card_name}: {card.category} ({card.cashback:.1f}%)")
    print(f"  Storage: {svc.storage_kind.value}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
