"""Record workflows: commit, sync, and history."""

from assetscan.application.records.commit import CommitPipeline, CommitResult, ScanRequest
from assetscan.application.records.history import (
    ExportBundle,
    clear_history,
    delete_records,
    export_records,
    list_history,
    write_export,
)
from assetscan.application.records.services import RecordServices
from assetscan.application.records.sync import SyncSummary, run_sync

__all__ = [
    "CommitPipeline",
    "CommitResult",
    "ScanRequest",
    "RecordServices",
    "SyncSummary",
    "run_sync",
    "ExportBundle",
    "list_history",
    "delete_records",
    "clear_history",
    "export_records",
    "write_export",
]
