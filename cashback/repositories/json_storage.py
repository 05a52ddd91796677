"""
JSON-file persistence adapter.

Cards live in ``cards.json`` and history in ``card_history.json``, each a
JSON array of objects, rewritten in full on every change.
"""

from __future__ import annotations

import json
from typing import Any

from cashback.repositories.base import StorageKind
from cashback.repositories.file_storage import CorruptFileError, FileCardRepository


class JSONCardRepository(FileCardRepository):
    kind = StorageKind.JSON
    suffix = ".json"

    def encode(self, collection: str, records: list[dict[str, Any]]) -> str:
        return json.dumps(records, ensure_ascii=False, indent=2)

    def decode(self, collection: str, text: str) -> list[dict[str, Any]]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CorruptFileError(str(exc)) from exc
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise CorruptFileError(f"{collection}: expected a list of objects")
        return data
