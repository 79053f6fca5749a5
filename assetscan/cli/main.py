#!/usr/bin/env python3

import argparse
from collections.abc import Callable, Sequence


def _coerce_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _run_command(command: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
    """
    Normalize command handlers that call sys.exit().

    This keeps process termination centralized in this module's entrypoint.
    """
    try:
        command(args)
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assetscan",
        description="Asset inventory scanner CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  scan <payload> [--period YYYY-MM] [--offline]
                             Commit one scanned QR payload
  sync [--offline]           Re-enrich offline records and upload pending ones
  list [--query TEXT]        List saved records, newest first
  delete <id>...             Delete records by identity (see `list`)
  clear [--yes]              Delete every saved record
  export [--query TEXT]      Export records to a JSON file
  serve [--host] [--port]    Start the scan server

Notes:
  One history holds one organization's inventory for one reporting period.
  Clear history before starting a new round.
""",
    )
    parser.add_argument("--config", default=None, help="Settings TOML (default: config/assetscan.toml)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    scan_parser = subparsers.add_parser("scan", help="Commit one scanned QR payload")
    scan_parser.add_argument("payload", help="Raw scanned text (fields separated by ^?)")
    scan_parser.add_argument("--period", default=None, help="Reporting period YYYY-MM (default: current month)")
    scan_parser.add_argument("--offline", action="store_true", help="Skip catalog lookup and upload")
    scan_parser.add_argument("--device-id", default=None, help="Override the configured device id")

    sync_parser = subparsers.add_parser("sync", help="Re-enrich offline records and upload pending ones")
    sync_parser.add_argument("--offline", action="store_true", help="Report without contacting services")

    list_parser = subparsers.add_parser("list", help="List saved records")
    list_parser.add_argument("--query", "-q", default=None, help="Case-insensitive search text")

    delete_parser = subparsers.add_parser("delete", help="Delete records by identity")
    delete_parser.add_argument("identities", nargs="+", help="Record identities as printed by `list`")

    clear_parser = subparsers.add_parser("clear", help="Delete every saved record")
    clear_parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    export_parser = subparsers.add_parser("export", help="Export records to JSON")
    export_parser.add_argument("--query", "-q", default=None, help="Only export matching records")
    export_parser.add_argument("--output-dir", default=None, help="Directory for the export (default: exports/)")

    serve_parser = subparsers.add_parser("serve", help="Start the scan server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=8080, help="Port to bind to (default: 8080)")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    from assetscan.cli import records

    handlers: dict[str, Callable[[argparse.Namespace], None]] = {
        "scan": records.cmd_scan,
        "sync": records.cmd_sync,
        "list": records.cmd_list,
        "delete": records.cmd_delete,
        "clear": records.cmd_clear,
        "export": records.cmd_export,
        "serve": records.cmd_serve,
    }
    handler = handlers.get(args.command)
    if handler is None:
        return 1
    return _run_command(handler, args)


if __name__ == "__main__":
    raise SystemExit(main())
