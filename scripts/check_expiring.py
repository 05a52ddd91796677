#!/usr/bin/env python3
"""
List cards whose cashback category needs to be renewed, optionally expiring them.

Usage:
  python scripts/check_expiring.py [--on 2026-10-19] [--expire] [--storage xml] [--data-dir data]
"""
from __future__ import annotations

import argparse
import sys
from datetime import date

from cashback.core.config import get_settings
from cashback.core.logging_config import configure_logging
from cashback.repositories.factory import create_repository
from cashback.services.card_service import CardService


def main() -> None:
    ap = argparse.ArgumentParser(description="Check cards with an expiring cashback category")
    ap.add_argument("--on", type=date.fromisoformat, default=date.today(), help="Reference date (default: today)")
    ap.add_argument("--expire", action="store_true", help="Mark the cards as EXPIRED")
    ap.add_argument("--storage", help="sqlite/json/xml (default: CASHBACK_STORAGE)")
    ap.add_argument("--data-dir", help="Data root (default: CASHBACK_DATA_DIR)")
    args = ap.parse_args()

    settings = get_settings()
    configure_logging(settings)
    data_dir = args.data_dir or settings.data_dir
    svc = CardService(create_repository(args.storage or settings.storage_kind, data_dir), data_dir=data_dir)

    cards = svc.expire_cards(args.on) if args.expire else svc.get_expiring_cards(args.on)
    if not cards:
        print("No cards need a category update.")
        return
    print("These cards need a cashback category update:")
    for card in cards:
        print(f"  {card.bank_name} {card.card_name}: {card.category} ({card.cashback:.1f}%)")
    if args.expire:
        print(f"{len(cards)} card(s) marked as {cards[0].status.display_name}.")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
