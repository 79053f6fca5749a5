"""Scan commit workflow orchestration.

One scan moves through

    IDLE -> PARSING -> (ENRICHING) -> VALIDATING -> REJECTED | PERSISTED -> (FORWARDING) -> IDLE

The busy flag is held for the whole run, so a second scan arriving while a
forward is still in flight is turned away rather than interleaving its
read-modify-write with ours. Local persistence is the durable outcome;
forwarding upstream is best-effort and never undoes it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Literal

from assetscan.domain.payload import LookupRequiredPayload, ParseError, build_record, parse_payload
from assetscan.domain.record import Record, ReportingPeriod, Verdict
from assetscan.domain.validation import validate_candidate
from assetscan.runtime import Settings, get_logger
from assetscan.runtime.busy import BusyFlag, StoreBusy
from assetscan.runtime.catalog_client import CatalogClient, forwarded_timestamp
from assetscan.runtime.record_store import RecordStore, StoreIOFailure, identity_of

logger = get_logger(__name__)

PipelineState = Literal[
    "IDLE",
    "PARSING",
    "ENRICHING",
    "VALIDATING",
    "REJECTED",
    "PERSISTED",
    "FORWARDING",
]

CommitStatus = Literal[
    "busy",
    "parse_error",
    "rejected",
    "store_error",
    "persisted",
]

FORWARD_FAILED_NOTICE = "upload to the ingestion service failed; the record is kept locally and will be retried on refresh."


@dataclass(frozen=True)
class ScanRequest:
    """Inputs for committing one scan."""

    raw: str
    period: ReportingPeriod
    connected: bool
    device_id: str | None = None


@dataclass(frozen=True)
class CommitResult:
    """Outcome from one commit run."""

    status: CommitStatus
    record: Record | None = None
    verdict: Verdict | None = None
    error: str | None = None
    notices: tuple[str, ...] = ()
    states: tuple[PipelineState, ...] = ()
    forwarded: bool = False

    @property
    def persisted(self) -> bool:
        return self.status == "persisted"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CommitPipeline:
    """Parses, enriches, validates, stores and forwards scanned payloads."""

    def __init__(
        self,
        store: RecordStore,
        catalog: CatalogClient,
        settings: Settings,
        busy: BusyFlag | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.settings = settings
        self.busy = busy or BusyFlag()
        self._clock = clock
        self._state: PipelineState = "IDLE"
        self._trail: list[PipelineState] = []

    @property
    def state(self) -> PipelineState:
        return self._state

    def _enter(self, state: PipelineState) -> None:
        logger.debug("Commit pipeline %s -> %s", self._state, state)
        self._state = state
        self._trail.append(state)

    def _finish(
        self,
        status: CommitStatus,
        record: Record | None = None,
        verdict: Verdict | None = None,
        error: str | None = None,
        notices: tuple[str, ...] = (),
        forwarded: bool = False,
    ) -> CommitResult:
        return CommitResult(
            status=status,
            record=record,
            verdict=verdict,
            error=error,
            notices=notices,
            states=tuple(self._trail),
            forwarded=forwarded,
        )

    async def submit(self, request: ScanRequest) -> CommitResult:
        """Run one scan through the pipeline."""
        try:
            with self.busy.hold("commit"):
                self._trail = []
                try:
                    return await self._run(request)
                finally:
                    self._state = "IDLE"
        except StoreBusy as e:
            logger.info("%s", e)
            return CommitResult(status="busy", error=str(e))

    async def _run(self, request: ScanRequest) -> CommitResult:
        device_id = request.device_id or self.settings.device_id

        self._enter("PARSING")
        try:
            payload = parse_payload(request.raw)
        except ParseError as e:
            logger.warning("Rejected scan: %s", e)
            self._enter("REJECTED")
            return self._finish("parse_error", error=str(e))

        created_at = self._clock().isoformat(timespec="milliseconds")
        candidate = build_record(payload, request.period, device_id, created_at)

        if isinstance(payload, LookupRequiredPayload):
            self._enter("ENRICHING")
            candidate = await self.catalog.enrich(candidate, request.period, device_id, request.connected)

        self._enter("VALIDATING")
        try:
            records = self.store.load()
        except StoreIOFailure as e:
            logger.error("%s", e)
            self._enter("REJECTED")
            return self._finish("store_error", record=candidate, error=str(e))

        verdict = validate_candidate(candidate, records, request.period, request.connected)
        if verdict.is_blocking:
            logger.info("Blocked %s: %s", identity_of(candidate), verdict.reasons[0])
            self._enter("REJECTED")
            return self._finish("rejected", record=candidate, verdict=verdict, error=verdict.reasons[0])

        try:
            self.store.append(candidate)
        except StoreIOFailure as e:
            logger.error("%s", e)
            self._enter("REJECTED")
            return self._finish("store_error", record=candidate, verdict=verdict, error=str(e))
        self._enter("PERSISTED")

        notices: list[str] = []
        forwarded = False
        if request.connected and candidate.is_complete:
            self._enter("FORWARDING")
            forwarded = await self.catalog.forward(candidate)
            if forwarded:
                candidate = self._mark_forwarded(candidate, notices)
            else:
                notices.append(FORWARD_FAILED_NOTICE)

        self._enter("IDLE")
        return self._finish(
            "persisted",
            record=candidate,
            verdict=verdict,
            notices=tuple(notices),
            forwarded=forwarded,
        )

    def _mark_forwarded(self, record: Record, notices: list[str]) -> Record:
        updated = replace(record, forwarded_at=forwarded_timestamp())
        key = identity_of(record)
        try:
            records = self.store.load()
            self.store.replace_all(updated if identity_of(r) == key else r for r in records)
        except StoreIOFailure as e:
            logger.error("Forwarded %s but could not record it locally: %s", key, e)
            notices.append(f"uploaded, but the local upload marker could not be saved: {e}")
            return record
        return updated
