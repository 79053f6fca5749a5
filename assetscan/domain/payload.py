"""Pure parsing of raw QR scan payloads.

A scan is a ``^?``-delimited field vector:

    [0] issuer id, [1] account, [2] asset code, [3] unit price, [4] date,
    [5] organization code, [6] serial number, [7] custodian, [8] asset name

Nine fields carry everything needed for a record ("self-contained"). Seven
fields stop after the serial number; the descriptive fields must come from the
remote catalog ("lookup-required").
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date as date_cls
from typing import Literal

from assetscan.domain.record import (
    COMPLETE,
    ENRICHMENT_PENDING,
    CompletenessTag,
    Record,
    ReportingPeriod,
)

FIELD_DELIMITER = "^?"
SELF_CONTAINED_FIELD_COUNT = 9
LOOKUP_REQUIRED_FIELD_COUNT = 7
ORGANIZATION_FIELD_INDEX = 5

_DELIMITED_DATE = re.compile(r"^(\d{4})([-./])(\d{1,2})\2(\d{1,2})$")
_COMPACT_DATE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")


class ParseError(ValueError):
    """Raised when a scan payload does not have a recognized shape."""


@dataclass(frozen=True)
class PayloadFields:
    """Named fields shared by both payload kinds."""

    issuer_id: str
    account: str
    asset_code: str
    unit_price: str
    date: str
    organization_code: str
    serial_number: str


@dataclass(frozen=True)
class SelfContainedPayload:
    raw: str
    fields: PayloadFields
    custodian: str
    asset_name: str
    kind: Literal["self_contained"] = "self_contained"

    @property
    def completeness_tag(self) -> CompletenessTag:
        return COMPLETE


@dataclass(frozen=True)
class LookupRequiredPayload:
    raw: str
    fields: PayloadFields
    kind: Literal["lookup_required"] = "lookup_required"

    @property
    def completeness_tag(self) -> CompletenessTag:
        return ENRICHMENT_PENDING


ScanPayload = SelfContainedPayload | LookupRequiredPayload


def split_payload(raw: str) -> list[str]:
    """Split a raw scan on the field delimiter, stripping each field."""
    return [part.strip() for part in raw.split(FIELD_DELIMITER)]


def normalize_date(value: str) -> str:
    """
    Normalize a scanned date to zero-padded ``YYYY-MM-DD``.

    Accepts ``YYYY-MM-DD``, ``YYYY.MM.DD``, ``YYYY/MM/DD`` and ``YYYYMMDD``.
    Anything else (including impossible dates) is returned unchanged.
    """
    text = value.strip()
    match = _DELIMITED_DATE.match(text)
    if match:
        year, month, day = match.group(1), match.group(3), match.group(4)
    else:
        match = _COMPACT_DATE.match(text)
        if not match:
            return value
        year, month, day = match.groups()

    try:
        return date_cls(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return value


def parse_payload(raw: str) -> ScanPayload:
    """
    Parse raw scanned text into a tagged payload.

    Raises:
        ParseError: if the text is empty or does not split into 7 or 9 fields.
    """
    if not raw or not raw.strip():
        raise ParseError("malformed payload: empty scan")

    parts = split_payload(raw.strip())
    if len(parts) not in (LOOKUP_REQUIRED_FIELD_COUNT, SELF_CONTAINED_FIELD_COUNT):
        raise ParseError(
            f"malformed payload: expected {LOOKUP_REQUIRED_FIELD_COUNT} or "
            f"{SELF_CONTAINED_FIELD_COUNT} fields, got {len(parts)}"
        )

    fields = PayloadFields(
        issuer_id=parts[0],
        account=parts[1],
        asset_code=parts[2],
        unit_price=parts[3],
        date=normalize_date(parts[4]),
        organization_code=parts[5],
        serial_number=parts[6],
    )
    if len(parts) == SELF_CONTAINED_FIELD_COUNT:
        return SelfContainedPayload(raw=raw.strip(), fields=fields, custodian=parts[7], asset_name=parts[8])
    return LookupRequiredPayload(raw=raw.strip(), fields=fields)


def build_record(
    payload: ScanPayload,
    period: ReportingPeriod,
    device_id: str,
    created_at: str,
) -> Record:
    """Turn a parsed payload into an uncommitted record candidate."""
    fields = payload.fields
    custodian = ""
    asset_name = ""
    if isinstance(payload, SelfContainedPayload):
        custodian = payload.custodian
        asset_name = payload.asset_name

    return Record(
        asset_code=fields.asset_code,
        serial_number=fields.serial_number,
        raw_payload=payload.raw,
        created_at=created_at,
        account=fields.account,
        unit_price=fields.unit_price,
        date=fields.date,
        organization_code=fields.organization_code,
        custodian=custodian,
        asset_name=asset_name,
        device_id=device_id,
        reporting_year=period.year,
        reporting_month=period.month,
        completeness_tag=payload.completeness_tag,
        issuer_id=fields.issuer_id,
    )
