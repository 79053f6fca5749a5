"""Record command handlers used by the unified CLI."""

import argparse
import asyncio
import sys
from datetime import date
from pathlib import Path

from assetscan.application.records import (
    RecordServices,
    ScanRequest,
    clear_history,
    delete_records,
    export_records,
    list_history,
    run_sync,
    write_export,
)
from assetscan.domain.record import ReportingPeriod
from assetscan.runtime import get_logger, get_paths, load_settings
from assetscan.runtime.busy import BusyFlag, StoreBusy
from assetscan.runtime.record_store import RecordStore, StoreIOFailure, identity_of

logger = get_logger(__name__)


def _services(args: argparse.Namespace) -> RecordServices:
    config = getattr(args, "config", None)
    return RecordServices.create(load_settings(config))


def _store(args: argparse.Namespace) -> RecordStore:
    return RecordStore.from_settings(load_settings(getattr(args, "config", None)))


def _period(value: str | None) -> ReportingPeriod:
    if value is None:
        today = date.today()
        return ReportingPeriod(today.year, today.month)
    try:
        return ReportingPeriod.parse(value)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(2)


def cmd_scan(args: argparse.Namespace) -> None:
    """Commit one raw scan payload."""
    request = ScanRequest(
        raw=args.payload,
        period=_period(args.period),
        connected=not args.offline,
        device_id=args.device_id,
    )
    services = _services(args)

    async def _submit():
        try:
            return await services.pipeline().submit(request)
        finally:
            await services.aclose()

    result = asyncio.run(_submit())

    if result.status == "parse_error":
        print(f"Scan rejected: {result.error}")
        print("Scan again.")
        sys.exit(1)

    if result.status == "busy":
        print(f"Scanner busy: {result.error}")
        sys.exit(1)

    if result.status == "rejected":
        print(f"Not saved: {result.error}")
        sys.exit(1)

    if result.status == "store_error":
        print(f"Storage unavailable, record NOT saved: {result.error}")
        sys.exit(1)

    record = result.record
    assert record is not None
    print("=" * 60)
    print(f"Saved: {record.asset_code} / {record.serial_number}")
    print(f"Name: {record.asset_name or '-'}")
    print(f"Custodian: {record.custodian or '-'}")
    print(f"Price: {record.unit_price or '-'}  Date: {record.date or '-'}")
    print(f"Status: {record.completeness_tag}")
    if result.verdict is not None and result.verdict.level == "WARNING":
        for reason in result.verdict.reasons:
            print(f"Warning: {reason}")
    for notice in result.notices:
        print(f"Notice: {notice}")
    print("=" * 60)


def cmd_sync(args: argparse.Namespace) -> None:
    """Re-enrich offline records and forward pending ones."""
    services = _services(args)

    async def _sync():
        try:
            return await run_sync(
                services.store,
                services.catalog,
                services.settings,
                services.busy,
                connected=not args.offline,
            )
        finally:
            await services.aclose()

    summary = asyncio.run(_sync())
    if summary.status != "completed":
        print(f"Sync failed: {summary.error}")
        sys.exit(1)

    print(
        f"Updated {summary.updated} of {summary.selected} incomplete records "
        f"({summary.still_incomplete} still incomplete)."
    )
    print(f"Uploaded {summary.forwarded} records, {summary.forward_failures} failed.")


def cmd_list(args: argparse.Namespace) -> None:
    """List stored records, newest first."""
    try:
        records = list_history(_store(args), args.query)
    except StoreIOFailure as e:
        print(f"Error: {e}")
        sys.exit(1)

    if not records:
        print("No saved records.")
        return

    print(f"Records ({len(records)}):")
    for record in records:
        period = record.period.label if record.period else "----"
        name = record.asset_name or "-"
        print(f"  [{period}] {record.asset_code} {record.serial_number} {name} ({record.completeness_tag})")
        print(f"      id: {identity_of(record)}")


def cmd_delete(args: argparse.Namespace) -> None:
    """Delete records by identity."""
    try:
        removed = delete_records(_store(args), BusyFlag(), args.identities)
    except (StoreBusy, StoreIOFailure) as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(f"Deleted {removed} records.")


def cmd_clear(args: argparse.Namespace) -> None:
    """Delete every stored record."""
    if not args.yes:
        print("Delete ALL saved records? [y/N] ", end="")
        response = input().strip().lower()
        if response != "y":
            logger.info("Aborted by user")
            return

    try:
        removed = clear_history(_store(args), BusyFlag())
    except (StoreBusy, StoreIOFailure) as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(f"Cleared {removed} records.")


def cmd_export(args: argparse.Namespace) -> None:
    """Export (optionally filtered) records to a JSON file."""
    try:
        records = list_history(_store(args), args.query)
    except StoreIOFailure as e:
        print(f"Error: {e}")
        sys.exit(1)

    output_dir = Path(args.output_dir) if args.output_dir else get_paths().exports
    path = write_export(export_records(records), output_dir)
    print(f"Exported {len(records)} records to {path}")


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI server for the scanning device."""
    import uvicorn

    from assetscan.runtime.scan_server import create_app

    print(f"Starting asset scan server on {args.host}:{args.port}")
    print(f"Scan endpoint: http://{args.host}:{args.port}/scan")
    print("Press Ctrl+C to stop")

    app = create_app(settings=load_settings(getattr(args, "config", None)))
    uvicorn.run(app, host=args.host, port=args.port)
