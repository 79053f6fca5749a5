"""Tests for scan payload parsing and date normalization."""

from __future__ import annotations

import pytest

from assetscan.domain.payload import (
    LookupRequiredPayload,
    ParseError,
    SelfContainedPayload,
    build_record,
    normalize_date,
    parse_payload,
)
from assetscan.domain.record import COMPLETE, ENRICHMENT_PENDING, ReportingPeriod

NINE_FIELDS = "L1^?ACC1^?CODE9^?100^?2025-01-15^?ORG1^?SN1^?Jane^?Widget"
SEVEN_FIELDS = "L1^?ACC1^?CODE7^?250^?2025.03.04^?ORG1^?SN7"


@pytest.mark.parametrize("field_count", [1, 2, 6, 8, 10, 12])
def test_parse_rejects_unsupported_field_counts(field_count: int) -> None:
    raw = "^?".join(f"f{i}" for i in range(field_count))
    with pytest.raises(ParseError, match="malformed payload"):
        parse_payload(raw)


def test_parse_rejects_empty_scan() -> None:
    with pytest.raises(ParseError):
        parse_payload("   ")


def test_self_contained_scenario_builds_expected_record() -> None:
    payload = parse_payload(NINE_FIELDS)
    assert isinstance(payload, SelfContainedPayload)
    assert payload.kind == "self_contained"

    record = build_record(payload, ReportingPeriod(2025, 1), "dev-1", "2025-01-20T10:00:00.000+00:00")
    assert record.asset_code == "CODE9"
    assert record.unit_price == "100"
    assert record.account == "ACC1"
    assert record.date == "2025-01-15"
    assert record.serial_number == "SN1"
    assert record.custodian == "Jane"
    assert record.asset_name == "Widget"
    assert record.organization_code == "ORG1"
    assert record.issuer_id == "L1"
    assert record.completeness_tag == COMPLETE
    assert (record.reporting_year, record.reporting_month) == (2025, 1)


def test_lookup_required_payload_leaves_descriptive_fields_empty() -> None:
    payload = parse_payload(SEVEN_FIELDS)
    assert isinstance(payload, LookupRequiredPayload)
    assert payload.fields.date == "2025-03-04"

    record = build_record(payload, ReportingPeriod(2025, 3), "dev-1", "2025-03-05T00:00:00.000+00:00")
    assert record.custodian == ""
    assert record.asset_name == ""
    assert record.unit_type == ""
    assert record.completeness_tag == ENRICHMENT_PENDING


def test_fields_are_stripped() -> None:
    payload = parse_payload(" L1 ^? ACC1^?CODE7 ^?250^?20250304^?ORG1^?SN7 \n")
    assert payload.fields.issuer_id == "L1"
    assert payload.fields.asset_code == "CODE7"
    assert payload.fields.serial_number == "SN7"
    assert payload.fields.date == "2025-03-04"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2025-01-15", "2025-01-15"),
        ("2025.01.15", "2025-01-15"),
        ("2025/01/15", "2025-01-15"),
        ("20250115", "2025-01-15"),
        ("2025/1/5", "2025-01-05"),
        ("2025.12.3", "2025-12-03"),
    ],
)
def test_normalize_date_known_shapes(value: str, expected: str) -> None:
    assert normalize_date(value) == expected


@pytest.mark.parametrize("value", ["15/01/2025", "Jan 15 2025", "2025-13-40", "2025-01.15", ""])
def test_normalize_date_passes_unknown_shapes_through(value: str) -> None:
    assert normalize_date(value) == value
