"""Tests for the HTTP surface used by the scanning device."""

from __future__ import annotations

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from assetscan.application.records import RecordServices
from assetscan.runtime.record_store import identity_of
from assetscan.runtime.scan_server import create_app

NINE_FIELDS = "L1^?ACC1^?CODE9^?100^?2025-01-15^?ORG1^?SN1^?Jane^?Widget"


@pytest.fixture
def services(settings, fake_service) -> RecordServices:
    return RecordServices.create(settings, http_client=fake_service.client())


@pytest.fixture
def client(services) -> TestClient:
    return TestClient(create_app(services))


def _scan(client: TestClient, raw: str = NINE_FIELDS, **overrides: object) -> httpx.Response:
    body: dict[str, object] = {"raw": raw, "year": 2025, "month": 1, "connected": True}
    body.update(overrides)
    return client.post("/scan", json=body)


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_scan_persists(client, services) -> None:
    response = _scan(client)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "persisted"
    assert data["level"] == "OK"
    assert data["record"]["assetCode"] == "CODE9"
    assert data["forwarded"] is True
    assert len(services.store.load()) == 1


def test_scan_parse_error(client) -> None:
    response = _scan(client, raw="only^?three^?fields")
    assert response.status_code == 422
    assert response.json()["status"] == "parse_error"


def test_scan_duplicate_blocked(client) -> None:
    _scan(client)
    response = _scan(client)
    assert response.status_code == 422
    data = response.json()
    assert data["status"] == "rejected"
    assert data["level"] == "BLOCKING"
    assert data["reasons"] == ["duplicate asset already recorded."]


def test_scan_rejects_invalid_month(client) -> None:
    assert _scan(client, month=13).status_code == 422


def test_scan_busy(client, services) -> None:
    with services.busy.hold("sync"):
        response = _scan(client)
    assert response.status_code == 409
    assert response.json()["status"] == "busy"


def test_records_listing_search_and_delete(client, services) -> None:
    _scan(client)
    _scan(client, raw=NINE_FIELDS.replace("SN1", "SN2").replace("Widget", "Gadget"))

    listing = client.get("/records").json()
    assert listing["count"] == 2
    assert client.get("/records", params={"q": "gadget"}).json()["count"] == 1

    target = identity_of(services.store.load()[0])
    response = client.request("DELETE", "/records", json={"identities": [target]})
    assert response.json() == {"status": "ok", "removed": 1}
    assert client.get("/records").json()["count"] == 1


def test_clear_all(client) -> None:
    _scan(client)
    assert client.delete("/records/all").json()["removed"] == 1
    assert client.get("/records").json()["count"] == 0


def test_export_attachment(client) -> None:
    _scan(client)
    response = client.get("/records/export")
    assert response.status_code == 200
    assert "asset-export_" in response.headers["content-disposition"]
    assert json.loads(response.content)[0]["assetCode"] == "CODE9"


def test_sync_endpoint(client) -> None:
    response = client.post("/sync", json={"connected": False})
    assert response.status_code == 200
    assert response.json()["status"] == "completed"


def test_store_failure_maps_to_503(client, services) -> None:
    services.store.path.write_text("{broken")
    response = client.get("/records")
    assert response.status_code == 503
    assert response.json()["status"] == "store_error"


def test_scan_rejects_non_positive_year(client) -> None:
    assert _scan(client, year=0).status_code == 422


def test_app_builds_services_from_given_settings(settings) -> None:
    with TestClient(create_app(settings=settings)) as client:
        assert client.get("/health").status_code == 200
        assert client.app.state.services.settings is settings
        assert client.get("/records").json()["count"] == 0
