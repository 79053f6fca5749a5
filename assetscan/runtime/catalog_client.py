"""HTTP client for the remote asset catalog and ingestion services.

Both calls are best-effort: a lookup that cannot complete degrades the record
instead of raising, and a failed forward is logged and reported as False.
"""

from __future__ import annotations

import json
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

import httpx

from assetscan.domain.payload import FIELD_DELIMITER, normalize_date
from assetscan.domain.record import COMPLETE, ENRICHMENT_FAILED, OFFLINE_ASSET_NAME, Record, ReportingPeriod
from assetscan.runtime.logging import get_logger
from assetscan.runtime.settings import Settings

logger = get_logger(__name__)

# Catalog response key -> Record attribute.
CATALOG_FIELD_MAP: dict[str, str] = {
    "name": "asset_name",
    "unt": "unit_type",
    "lord": "custodian",
    "dans": "account",
    "une": "unit_price",
    "ognoo": "date",
}


def unwrap_json_payload(value: Any) -> Any:
    """
    Undo at most one level of string-encoded JSON.

    The catalog sometimes returns a JSON string whose content is itself JSON.
    A string is decoded once; if it is not valid JSON it is returned as-is.
    Non-string values pass through untouched. The result is never decoded a
    second time, so malformed responses cannot loop.
    """
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def decode_lookup_body(text: str) -> dict[str, Any] | None:
    """Decode a lookup response body into one catalog entry, or None if unusable."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None

    data = unwrap_json_payload(data)
    if isinstance(data, list):
        data = data[0] if data else None
    if not isinstance(data, dict):
        return None
    return data


def apply_catalog_entry(record: Record, entry: dict[str, Any]) -> Record:
    """Merge catalog fields onto a record and mark it complete.

    Fields the catalog omits (missing, null or blank) keep the record's value.
    """
    updates: dict[str, Any] = {}
    for key, attr in CATALOG_FIELD_MAP.items():
        value = entry.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if not text:
            continue
        updates[attr] = normalize_date(text) if attr == "date" else text

    if updates.get("asset_name") is None and record.asset_name == OFFLINE_ASSET_NAME:
        updates["asset_name"] = ""
    updates["completeness_tag"] = COMPLETE
    return replace(record, **updates)


def degrade_record(record: Record) -> Record:
    """Mark a record as captured without catalog data."""
    return replace(record, asset_name=OFFLINE_ASSET_NAME, completeness_tag=ENRICHMENT_FAILED)


def build_lookup_key(raw_payload: str, period: ReportingPeriod, device_id: str) -> str:
    return FIELD_DELIMITER.join([raw_payload, period.label, device_id])


def build_forward_body(record: Record, quote: bool = False) -> str:
    """Delimiter-joined payload sent upstream, optionally wrapped in quotes."""
    period = record.period
    parts = [
        record.issuer_id,
        record.account,
        record.asset_code,
        record.unit_price,
        record.date,
        record.organization_code,
        record.serial_number,
        record.custodian,
        record.asset_name,
        period.label if period is not None else "",
        record.device_id,
        record.completeness_tag,
    ]
    body = FIELD_DELIMITER.join(parts)
    if quote:
        return f'"{body}"'
    return body


class CatalogClient:
    """Async client for catalog lookups and record forwarding."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> CatalogClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def lookup(self, raw_payload: str, period: ReportingPeriod, device_id: str) -> dict[str, Any] | None:
        """
        Issue one catalog lookup.

        Returns:
            The catalog entry, or None on transport failure, error status, or an
            unusable body.
        """
        key = build_lookup_key(raw_payload, period, device_id)
        try:
            start_time = time.time()
            response = await self._client.post(self.settings.lookup_url, json=key)
            logger.debug("Catalog lookup returned in %.2f seconds", time.time() - start_time)
        except httpx.HTTPError as e:
            logger.warning("Catalog lookup failed: %s", e)
            return None

        if not response.is_success:
            logger.warning("Catalog lookup error: %s", response.status_code)
            return None

        entry = decode_lookup_body(response.text)
        if entry is None:
            logger.warning("Catalog lookup returned an unusable body")
        return entry

    async def enrich(
        self,
        record: Record,
        period: ReportingPeriod,
        device_id: str,
        connected: bool,
    ) -> Record:
        """
        Fill a lookup-required record from the catalog.

        Never raises: offline mode and every failure path return the record
        tagged ENRICHMENT_FAILED with the offline name placeholder.
        """
        if not connected:
            logger.info("Offline: skipping catalog lookup for %s", record.asset_code)
            return degrade_record(record)

        entry = await self.lookup(record.raw_payload, period, device_id)
        if entry is None:
            return degrade_record(record)
        return apply_catalog_entry(record, entry)

    async def forward(self, record: Record) -> bool:
        """Send a record to the ingestion service. Returns True on success."""
        body = build_forward_body(record, quote=self.settings.quote_forward_body)
        content_type = "application/json" if self.settings.quote_forward_body else "text/plain; charset=utf-8"
        try:
            response = await self._client.post(
                self.settings.ingest_url,
                content=body.encode("utf-8"),
                headers={"Content-Type": content_type},
            )
        except httpx.HTTPError as e:
            logger.error("Forwarding %s failed: %s", record.asset_code, e)
            return False

        if not response.is_success:
            logger.error("Forwarding %s rejected: %s", record.asset_code, response.status_code)
            return False
        return True


def forwarded_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
