"""XML-file persistence adapter (``cards.xml`` / ``card_history.xml``)."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

from cashback.domain.models import has_unstorable_chars
from cashback.repositories.base import StorageError, StorageKind
from cashback.repositories.file_storage import CorruptFileError, FileCardRepository

# collection -> (root tag, item tag)
TAGS = {
    "cards": ("cards", "card"),
    "history": ("history", "record"),
}


class XMLCardRepository(FileCardRepository):
    kind = StorageKind.XML
    suffix = ".xml"

    def encode(self, collection: str, records: list[dict[str, Any]]) -> str:
        root_tag, item_tag = TAGS[collection]
        root = ET.Element(root_tag)
        for record in records:
            item = ET.SubElement(root, item_tag)
            for key, value in record.items():
                if value is None:
                    continue
                text = str(value)
                if has_unstorable_chars(text):
                    raise StorageError(f"{key} of a {item_tag} contains characters XML cannot store")
                ET.SubElement(item, key).text = text
        ET.indent(root)
        body = ET.tostring(root, encoding="unicode")
        # parsers normalize a literal CR to LF; only a character reference survives
        body = body.replace("\r", "&#13;")
        return "<?xml version='1.0' encoding='UTF-8'?>\n" + body + "\n"

    def decode(self, collection: str, text: str) -> list[dict[str, Any]]:
        root_tag, item_tag = TAGS[collection]
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise CorruptFileError(str(exc)) from exc
        if root.tag != root_tag:
            raise CorruptFileError(f"expected <{root_tag}> root, found <{root.tag}>")
        records = []
        for item in root:
            if item.tag != item_tag:
                raise CorruptFileError(f"unexpected <{item.tag}> inside <{root_tag}>")
            records.append({field.tag: field.text or "" for field in item})
        return records
