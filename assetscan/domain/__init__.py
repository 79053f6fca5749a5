"""Core domain models and pure logic for the asset scanner.

- Record, ReportingPeriod, Verdict: data models
- parse_payload / build_record: scan payload parsing
- migrate_entry: legacy stored-shape migration
- validate_candidate: reconciliation against the local dataset

Usage:
    from assetscan.domain import Record, ReportingPeriod, parse_payload
"""

from assetscan.domain.migration import migrate_entry
from assetscan.domain.payload import (
    LookupRequiredPayload,
    ParseError,
    SelfContainedPayload,
    build_record,
    normalize_date,
    parse_payload,
)
from assetscan.domain.record import (
    COMPLETE,
    ENRICHMENT_FAILED,
    ENRICHMENT_PENDING,
    OFFLINE_ASSET_NAME,
    Record,
    ReportingPeriod,
    Verdict,
)
from assetscan.domain.validation import validate_candidate

__all__ = [
    "COMPLETE",
    "ENRICHMENT_FAILED",
    "ENRICHMENT_PENDING",
    "OFFLINE_ASSET_NAME",
    "LookupRequiredPayload",
    "ParseError",
    "Record",
    "ReportingPeriod",
    "SelfContainedPayload",
    "Verdict",
    "build_record",
    "migrate_entry",
    "normalize_date",
    "parse_payload",
    "validate_candidate",
]
