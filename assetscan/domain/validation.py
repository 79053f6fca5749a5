"""Reconciliation of a candidate record against the local dataset.

A store holds one organization's inventory for one reporting period. The
checks run in a fixed order and the first blocking finding wins: organization
first (a cross-organization candidate makes duplicate checks meaningless), then
duplicates, then the reporting period. Only when nothing blocks are the
advisory findings collected.
"""

from __future__ import annotations

from collections.abc import Sequence

from assetscan.domain.record import Record, ReportingPeriod, Verdict

CROSS_ORGANIZATION_REASON = "cross-organization conflict; clear history before starting a new inventory round."
DUPLICATE_REASON = "duplicate asset already recorded."
INCOMPLETE_REASON = "enrichment incomplete (offline or lookup failure)."
OFFLINE_REASON = "offline mode: record will be stored locally only."
READY_REASON = "ready to save."


def _stored_organization(records: Sequence[Record]) -> str | None:
    for record in records:
        if record.organization_code:
            return record.organization_code
    return None


def _conflicting_periods(records: Sequence[Record], period: ReportingPeriod) -> list[str]:
    labels = {
        record.period.label
        for record in records
        if record.period is not None and record.period != period
    }
    return sorted(labels)


def period_conflict_reason(conflicts: Sequence[str], period: ReportingPeriod) -> str:
    joined = ", ".join(conflicts)
    return (
        f"reporting period conflict: history already holds records for {joined} "
        f"but {period.label} is selected; switch the period or clear history."
    )


def validate_candidate(
    candidate: Record,
    records: Sequence[Record],
    period: ReportingPeriod,
    connected: bool,
) -> Verdict:
    """
    Validate a candidate against a snapshot of the stored records.

    Pure: the same candidate, snapshot, period and connectivity always give the
    same verdict.
    """
    stored_org = _stored_organization(records)
    if stored_org is not None and candidate.organization_code != stored_org:
        return Verdict("BLOCKING", (CROSS_ORGANIZATION_REASON,))

    for record in records:
        if record.asset_code == candidate.asset_code and record.serial_number == candidate.serial_number:
            return Verdict("BLOCKING", (DUPLICATE_REASON,))

    conflicts = _conflicting_periods(records, period)
    if conflicts:
        return Verdict("BLOCKING", (period_conflict_reason(conflicts, period),))

    findings: list[str] = []
    if not candidate.is_complete:
        findings.append(INCOMPLETE_REASON)
    if not connected:
        findings.append(OFFLINE_REASON)

    if findings:
        return Verdict("WARNING", tuple(findings))
    return Verdict("OK", (READY_REASON,))
