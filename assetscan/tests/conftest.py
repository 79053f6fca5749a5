"""Shared pytest fixtures for assetscan tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from assetscan.domain.record import COMPLETE, Record
from assetscan.runtime.record_store import RecordStore
from assetscan.runtime.settings import Settings

LOOKUP_URL = "http://catalog.test/lookup"
INGEST_URL = "http://catalog.test/ingest"


class FakeCatalogService:
    """Scriptable stand-in for the catalog and ingestion endpoints."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.lookup_response: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(500)
        self.ingest_status = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if str(request.url) == LOOKUP_URL:
            return self.lookup_response(request)
        if str(request.url) == INGEST_URL:
            return httpx.Response(self.ingest_status)
        return httpx.Response(404)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def lookups(self) -> list[httpx.Request]:
        return [request for request in self.requests if str(request.url) == LOOKUP_URL]

    def ingests(self) -> list[httpx.Request]:
        return [request for request in self.requests if str(request.url) == INGEST_URL]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        lookup_url=LOOKUP_URL,
        ingest_url=INGEST_URL,
        device_id="dev-1",
        store_path=tmp_path / "records.json",
    )


@pytest.fixture
def store(settings: Settings) -> RecordStore:
    return RecordStore.from_settings(settings)


@pytest.fixture
def fake_service() -> FakeCatalogService:
    return FakeCatalogService()


def _make_record(
    asset_code: str = "A1",
    serial_number: str = "S1",
    organization_code: str = "ORG1",
    year: int | None = 2025,
    month: int | None = 6,
    created_at: str = "2025-06-10T08:00:00.000+00:00",
    completeness_tag: str = COMPLETE,
    **overrides: object,
) -> Record:
    fields: dict[str, object] = {
        "asset_code": asset_code,
        "serial_number": serial_number,
        "raw_payload": f"L1^?ACC1^?{asset_code}^?100^?2025-01-15^?{organization_code}^?{serial_number}",
        "created_at": created_at,
        "account": "ACC1",
        "unit_price": "100",
        "date": "2025-01-15",
        "organization_code": organization_code,
        "asset_name": "Widget",
        "device_id": "dev-1",
        "reporting_year": year,
        "reporting_month": month,
        "completeness_tag": completeness_tag,
        "issuer_id": "L1",
    }
    fields.update(overrides)
    return Record(**fields)  # type: ignore[arg-type]


@pytest.fixture
def make_record() -> Callable[..., Record]:
    return _make_record
