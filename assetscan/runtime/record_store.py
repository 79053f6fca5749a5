"""Durable storage of committed asset records.

Records live as one JSON array under a well-known key inside a small JSON
key-value file:

    data/records.json
    {
      "@scanned_data_list": [ {...record...}, ... ]
    }

Every mutation is a whole-list read-modify-write. The store is not safe for
concurrent writers; callers serialize access with the busy flag.
"""

from __future__ import annotations

import json
import os
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from assetscan.domain.migration import migrate_entry
from assetscan.domain.record import Record
from assetscan.runtime.logging import get_logger
from assetscan.runtime.settings import DEFAULT_STORAGE_KEY, Settings

logger = get_logger(__name__)


class StoreIOFailure(RuntimeError):
    """Raised when the durable store cannot be read or written."""


def identity_of(record: Record) -> str:
    """Deterministic identity for a stored record."""
    return f"{record.asset_code}|{record.serial_number}|{record.created_at}"


class RecordStore:
    """Adapter over the JSON key-value file holding the record list."""

    def __init__(self, path: Path, storage_key: str = DEFAULT_STORAGE_KEY) -> None:
        self.path = path
        self.storage_key = storage_key

    @classmethod
    def from_settings(cls, settings: Settings) -> RecordStore:
        return cls(settings.resolved_store_path, settings.storage_key)

    identity_of = staticmethod(identity_of)

    def _read_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StoreIOFailure(f"Failed to read record store {self.path}: {e}") from e
        if not text.strip():
            return {}
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise StoreIOFailure(f"Record store {self.path} is not valid JSON: {e}") from e
        if not isinstance(document, dict):
            raise StoreIOFailure(f"Record store {self.path} must hold a JSON object")
        return document

    def _write_document(self, document: dict[str, Any]) -> None:
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StoreIOFailure(f"Failed to write record store {self.path}: {e}") from e

    def load(self) -> list[Record]:
        """
        Read the record list, migrating legacy entries.

        The migration is not written back; callers persist it when they next
        mutate the list.
        """
        raw_entries = self._read_document().get(self.storage_key, [])
        if not isinstance(raw_entries, list):
            raise StoreIOFailure(f"Record store key {self.storage_key!r} does not hold a list")

        records: list[Record] = []
        for index, entry in enumerate(raw_entries):
            try:
                records.append(migrate_entry(entry))
            except (TypeError, ValueError) as e:
                raise StoreIOFailure(f"Corrupt record at index {index} in {self.path}: {e}") from e
        return records

    def replace_all(self, records: Iterable[Record]) -> None:
        document = self._read_document()
        document[self.storage_key] = [record.to_dict() for record in records]
        self._write_document(document)
        logger.debug("Wrote %d records to %s", len(document[self.storage_key]), self.path)

    def append(self, record: Record) -> None:
        records = self.load()
        records.append(record)
        self.replace_all(records)
        logger.info("Stored %s", identity_of(record))

    def remove_where(self, predicate: Callable[[Record], bool]) -> int:
        """Remove every record matching predicate. Returns the number removed."""
        records = self.load()
        kept = [record for record in records if not predicate(record)]
        removed = len(records) - len(kept)
        if removed:
            self.replace_all(kept)
            logger.info("Removed %d records from %s", removed, self.path)
        return removed
