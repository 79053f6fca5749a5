"""Data models for scanned asset records."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

CompletenessTag = Literal["COMPLETE", "ENRICHMENT_PENDING", "ENRICHMENT_FAILED"]
COMPLETE: CompletenessTag = "COMPLETE"
ENRICHMENT_PENDING: CompletenessTag = "ENRICHMENT_PENDING"
ENRICHMENT_FAILED: CompletenessTag = "ENRICHMENT_FAILED"
COMPLETENESS_TAGS: tuple[CompletenessTag, ...] = (COMPLETE, ENRICHMENT_PENDING, ENRICHMENT_FAILED)

VerdictLevel = Literal["OK", "WARNING", "BLOCKING"]

# Asset name placeholder for records whose catalog lookup could not run.
OFFLINE_ASSET_NAME = "[offline]"

SCHEMA_VERSION = 2

# Python attribute -> stored JSON key.
_STORED_KEYS: dict[str, str] = {
    "asset_code": "assetCode",
    "serial_number": "serialNumber",
    "account": "account",
    "unit_price": "unitPrice",
    "date": "date",
    "organization_code": "organizationCode",
    "custodian": "custodian",
    "asset_name": "assetName",
    "unit_type": "unitType",
    "raw_payload": "rawPayload",
    "device_id": "deviceId",
    "reporting_year": "reportingYear",
    "reporting_month": "reportingMonth",
    "created_at": "createdAt",
    "completeness_tag": "completenessTag",
    "issuer_id": "issuerId",
    "forwarded_at": "forwardedAt",
    "schema_version": "schemaVersion",
}

_TEXT_FIELDS: tuple[str, ...] = (
    "asset_code",
    "serial_number",
    "account",
    "unit_price",
    "date",
    "organization_code",
    "custodian",
    "asset_name",
    "unit_type",
    "raw_payload",
    "device_id",
    "created_at",
    "issuer_id",
    "forwarded_at",
)


@dataclass(frozen=True, order=True)
class ReportingPeriod:
    """The (year, month) an inventory round is recorded against."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Reporting month must be 1-12, got {self.month}")
        if self.year < 1:
            raise ValueError(f"Reporting year must be positive, got {self.year}")

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @classmethod
    def parse(cls, value: str) -> ReportingPeriod:
        """Parse ``YYYY-MM`` (or ``YYYY/MM``) into a period."""
        text = value.strip().replace("/", "-")
        year_str, sep, month_str = text.partition("-")
        if not sep or not year_str.isdigit() or not month_str.isdigit():
            raise ValueError(f"Invalid reporting period: {value!r} (expected YYYY-MM)")
        return cls(int(year_str), int(month_str))


@dataclass
class Record:
    """One committed asset entry in the local store."""

    asset_code: str
    serial_number: str
    raw_payload: str
    created_at: str
    account: str = ""
    unit_price: str = ""
    date: str = ""
    organization_code: str = ""
    custodian: str = ""
    asset_name: str = ""
    unit_type: str = ""
    device_id: str = ""
    reporting_year: int | None = None
    reporting_month: int | None = None
    completeness_tag: CompletenessTag = COMPLETE
    issuer_id: str = ""
    forwarded_at: str | None = None
    schema_version: int = field(default=SCHEMA_VERSION)

    @property
    def period(self) -> ReportingPeriod | None:
        if self.reporting_year is None or self.reporting_month is None:
            return None
        return ReportingPeriod(self.reporting_year, self.reporting_month)

    @property
    def is_complete(self) -> bool:
        return self.completeness_tag == COMPLETE

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored (camelCase) JSON shape."""
        return {_STORED_KEYS[name]: value for name, value in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Record:
        """Build from a current-schema stored entry. Legacy shapes go through migration."""
        kwargs: dict[str, Any] = {}
        for name, key in _STORED_KEYS.items():
            if key in data and data[key] is not None:
                kwargs[name] = data[key]
        # Older builds stored catalog values (account, custodian, codes) as numbers.
        for name in _TEXT_FIELDS:
            if name in kwargs and not isinstance(kwargs[name], str):
                kwargs[name] = str(kwargs[name])
        for name in ("reporting_year", "reporting_month"):
            if name in kwargs:
                text = str(kwargs[name]).strip()
                kwargs[name] = int(text) if text else None
        record = cls(**kwargs)
        if record.reporting_year is not None and record.reporting_month is not None:
            ReportingPeriod(record.reporting_year, record.reporting_month)
        return record


@dataclass(frozen=True)
class Verdict:
    """Outcome of validating a candidate record against the store."""

    level: VerdictLevel
    reasons: tuple[str, ...]

    @property
    def is_blocking(self) -> bool:
        return self.level == "BLOCKING"
