"""Migration of stored entries from older record shapes to the current schema.

Three shapes exist in the wild:

- v2: the current camelCase schema (``schemaVersion == 2``).
- v1: camelCase-ish records from earlier app builds that used the catalog's
  own field names (``une``, ``ognoo``, ``dans`` ...) or short aliases
  (``price``, ``year``/``month``) and had no ``organizationCode``.
- history entries ``{"id", "text", "date"}`` written by the first prototype,
  where ``text`` is the raw scan and ``date`` the capture timestamp.
"""

from __future__ import annotations

from typing import Any

from assetscan.domain.payload import (
    FIELD_DELIMITER,
    ORGANIZATION_FIELD_INDEX,
    SELF_CONTAINED_FIELD_COUNT,
    normalize_date,
    split_payload,
)
from assetscan.domain.record import (
    COMPLETE,
    COMPLETENESS_TAGS,
    ENRICHMENT_PENDING,
    SCHEMA_VERSION,
    Record,
)

# Current key -> legacy aliases, first present wins.
_LEGACY_ALIASES: dict[str, tuple[str, ...]] = {
    "assetCode": ("code", "assetcode"),
    "serialNumber": ("serial", "serialNo"),
    "unitPrice": ("price", "une"),
    "date": ("ognoo", "scanDate"),
    "account": ("dans",),
    "assetName": ("name",),
    "custodian": ("lord",),
    "unitType": ("unt",),
    "organizationCode": ("orgCode", "organization"),
    "reportingYear": ("year",),
    "reportingMonth": ("month",),
    "rawPayload": ("raw", "scannedData"),
    "createdAt": ("timestamp",),
}

# Payload position -> current key, used to backfill fields from the raw scan.
_PAYLOAD_POSITIONS: dict[int, str] = {
    0: "issuerId",
    1: "account",
    2: "assetCode",
    3: "unitPrice",
    4: "date",
    5: "organizationCode",
    6: "serialNumber",
    7: "custodian",
    8: "assetName",
}


def organization_from_payload(raw_payload: str) -> str:
    """Re-derive the organization code from a stored raw scan (field index 5)."""
    if not raw_payload or FIELD_DELIMITER not in raw_payload:
        return ""
    parts = split_payload(raw_payload)
    if len(parts) <= ORGANIZATION_FIELD_INDEX:
        return ""
    return parts[ORGANIZATION_FIELD_INDEX]


def _is_history_entry(entry: dict[str, Any]) -> bool:
    return "text" in entry and "assetCode" not in entry and "rawPayload" not in entry


def _from_history_entry(entry: dict[str, Any]) -> dict[str, Any]:
    data: dict[str, Any] = {
        "rawPayload": str(entry.get("text", "")),
        "createdAt": str(entry.get("date", "")),
    }
    return data


def _apply_aliases(entry: dict[str, Any]) -> dict[str, Any]:
    data = dict(entry)
    for key, aliases in _LEGACY_ALIASES.items():
        if data.get(key) not in (None, ""):
            continue
        for alias in aliases:
            if entry.get(alias) not in (None, ""):
                data[key] = entry[alias]
                break
    return data


def _backfill_from_payload(data: dict[str, Any]) -> None:
    raw = str(data.get("rawPayload") or "")
    if FIELD_DELIMITER not in raw:
        return
    parts = split_payload(raw)
    for index, key in _PAYLOAD_POSITIONS.items():
        if index >= len(parts):
            break
        if data.get(key) in (None, ""):
            data[key] = parts[index]


def _infer_completeness(data: dict[str, Any]) -> str:
    tag = data.get("completenessTag")
    if tag in COMPLETENESS_TAGS:
        return str(tag)
    parts = split_payload(str(data.get("rawPayload") or ""))
    if data.get("assetName") or len(parts) == SELF_CONTAINED_FIELD_COUNT:
        return COMPLETE
    return ENRICHMENT_PENDING


def migrate_entry(entry: dict[str, Any]) -> Record:
    """
    Convert one stored entry (any known shape) into a current Record.

    Raises:
        ValueError: if the entry is not a mapping or lacks enough data to
            identify the asset.
    """
    if not isinstance(entry, dict):
        raise ValueError(f"Stored entry is not an object: {entry!r}")

    if entry.get("schemaVersion") == SCHEMA_VERSION and entry.get("organizationCode"):
        return Record.from_dict(entry)

    data = _from_history_entry(entry) if _is_history_entry(entry) else _apply_aliases(entry)

    if not data.get("organizationCode"):
        data["organizationCode"] = organization_from_payload(str(data.get("rawPayload") or ""))
    _backfill_from_payload(data)

    if not data.get("assetCode") and not data.get("rawPayload"):
        raise ValueError(f"Stored entry has neither assetCode nor rawPayload: {entry!r}")

    if data.get("date"):
        data["date"] = normalize_date(str(data["date"]))

    data.setdefault("assetCode", "")
    data.setdefault("serialNumber", "")
    data.setdefault("rawPayload", "")
    data.setdefault("createdAt", "")
    data["completenessTag"] = _infer_completeness(data)
    data["schemaVersion"] = SCHEMA_VERSION
    return Record.from_dict(data)
