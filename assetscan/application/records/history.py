"""History browsing, search, deletion and export workflows."""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from assetscan.domain.record import Record
from assetscan.runtime import get_logger
from assetscan.runtime.busy import BusyFlag
from assetscan.runtime.record_store import RecordStore, identity_of

logger = get_logger(__name__)

EXPORT_PREFIX = "asset-export"


@dataclass(frozen=True)
class ExportBundle:
    """Serialized records ready to hand to a share/export mechanism."""

    filename: str
    content: bytes
    count: int


def _matches(record: Record, needle: str) -> bool:
    haystack = (
        record.asset_code,
        record.serial_number,
        record.asset_name,
        record.custodian,
        record.account,
        record.organization_code,
        record.raw_payload,
    )
    return any(needle in value.lower() for value in haystack)


def list_history(store: RecordStore, query: str | None = None) -> list[Record]:
    """Stored records, newest first, optionally filtered by a search string."""
    records = sorted(store.load(), key=lambda record: record.created_at, reverse=True)
    if query and query.strip():
        needle = query.strip().lower()
        records = [record for record in records if _matches(record, needle)]
    return records


def delete_records(store: RecordStore, busy: BusyFlag, identities: Iterable[str]) -> int:
    """Delete selected records by identity. Raises StoreBusy while another operation runs."""
    targets = set(identities)
    if not targets:
        return 0
    with busy.hold("delete"):
        removed = store.remove_where(lambda record: identity_of(record) in targets)
    logger.info("Deleted %d of %d selected records", removed, len(targets))
    return removed


def clear_history(store: RecordStore, busy: BusyFlag) -> int:
    """Delete every stored record, ending the current inventory round."""
    with busy.hold("clear"):
        removed = store.remove_where(lambda record: True)
    logger.info("Cleared history (%d records)", removed)
    return removed


def export_records(records: Sequence[Record], now: datetime | None = None) -> ExportBundle:
    """Serialize records to JSON with a timestamped filename."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    content = json.dumps([record.to_dict() for record in records], ensure_ascii=False, indent=2)
    return ExportBundle(
        filename=f"{EXPORT_PREFIX}_{stamp}.json",
        content=content.encode("utf-8"),
        count=len(records),
    )


def write_export(bundle: ExportBundle, directory: Path) -> Path:
    """Write an export bundle into directory, never overwriting an earlier one."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / bundle.filename

    # Handle filename collisions by appending a counter
    counter = 1
    base_name = path.stem
    while path.exists():
        path = directory / f"{base_name}_{counter}.json"
        counter += 1

    path.write_bytes(bundle.content)
    logger.info("Exported %d records to %s", bundle.count, path)
    return path
