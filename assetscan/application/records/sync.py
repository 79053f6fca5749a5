"""Batch upload synchronizer for records captured offline.

Runs only when the user asks for it (the history "refresh" action). Each
incomplete record gets exactly one catalog lookup per pass, sequentially; the
whole list is then written back in one replace, and every complete record that
has not reached the ingestion service yet is forwarded.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Literal

from assetscan.domain.record import Record, ReportingPeriod
from assetscan.runtime import Settings, get_logger
from assetscan.runtime.busy import BusyFlag, StoreBusy
from assetscan.runtime.catalog_client import CatalogClient, apply_catalog_entry, forwarded_timestamp
from assetscan.runtime.record_store import RecordStore, StoreIOFailure, identity_of

logger = get_logger(__name__)

SyncStatus = Literal["busy", "store_error", "completed"]


@dataclass(frozen=True)
class SyncSummary:
    """Counts reported back to the caller after one pass."""

    status: SyncStatus
    selected: int = 0
    updated: int = 0
    still_incomplete: int = 0
    forwarded: int = 0
    forward_failures: int = 0
    error: str | None = None


def lookup_period(record: Record) -> ReportingPeriod | None:
    """Period to use when re-querying the catalog for a stored record.

    Records migrated from old builds may lack a period; the month they were
    captured in stands in for it.
    """
    if record.period is not None:
        return record.period
    try:
        created = datetime.fromisoformat(record.created_at.replace("Z", "+00:00"))
    except ValueError:
        return None
    return ReportingPeriod(created.year, created.month)


async def run_sync(
    store: RecordStore,
    catalog: CatalogClient,
    settings: Settings,
    busy: BusyFlag,
    connected: bool,
) -> SyncSummary:
    """Re-enrich incomplete records and forward whatever is ready."""
    try:
        with busy.hold("sync"):
            return await _run_pass(store, catalog, settings, connected)
    except StoreBusy as e:
        logger.info("%s", e)
        return SyncSummary(status="busy", error=str(e))


async def _run_pass(
    store: RecordStore,
    catalog: CatalogClient,
    settings: Settings,
    connected: bool,
) -> SyncSummary:
    try:
        records = store.load()
    except StoreIOFailure as e:
        logger.error("%s", e)
        return SyncSummary(status="store_error", error=str(e))

    selected = [index for index, record in enumerate(records) if not record.is_complete]
    logger.info("Sync pass: %d of %d records need enrichment", len(selected), len(records))

    updated = 0
    if not connected:
        logger.info("Offline: catalog lookups skipped for this pass")
    else:
        for index in selected:
            record = records[index]
            period = lookup_period(record)
            if period is None:
                logger.warning("No usable period for %s; skipped", identity_of(record))
                continue
            entry = await catalog.lookup(record.raw_payload, period, record.device_id or settings.device_id)
            if entry is None:
                continue
            records[index] = apply_catalog_entry(record, entry)
            updated += 1

    still_incomplete = len(selected) - updated

    if selected:
        try:
            store.replace_all(records)
        except StoreIOFailure as e:
            logger.error("%s", e)
            return SyncSummary(
                status="store_error",
                selected=len(selected),
                still_incomplete=len(selected),
                error=str(e),
            )

    forwarded = 0
    forward_failures = 0
    if connected:
        for index, record in enumerate(records):
            if not record.is_complete or record.forwarded_at is not None:
                continue
            if await catalog.forward(record):
                records[index] = replace(record, forwarded_at=forwarded_timestamp())
                forwarded += 1
            else:
                forward_failures += 1

    if forwarded:
        try:
            store.replace_all(records)
        except StoreIOFailure as e:
            # Upstream already has these; the next pass forwards them again.
            logger.error("Could not record upload markers: %s", e)
            return SyncSummary(
                status="store_error",
                selected=len(selected),
                updated=updated,
                still_incomplete=still_incomplete,
                forwarded=forwarded,
                forward_failures=forward_failures,
                error=str(e),
            )

    logger.info(
        "Sync pass done: %d updated, %d still incomplete, %d forwarded, %d forward failures",
        updated,
        still_incomplete,
        forwarded,
        forward_failures,
    )
    return SyncSummary(
        status="completed",
        selected=len(selected),
        updated=updated,
        still_incomplete=still_incomplete,
        forwarded=forwarded,
        forward_failures=forward_failures,
    )
