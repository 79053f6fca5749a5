"""Tests for history browsing, search, deletion and export."""

from __future__ import annotations

import json
from datetime import datetime

import pytest

from assetscan.application.records.history import (
    clear_history,
    delete_records,
    export_records,
    list_history,
    write_export,
)
from assetscan.runtime.busy import BusyFlag, StoreBusy
from assetscan.runtime.record_store import identity_of


@pytest.fixture
def seeded(store, make_record):
    records = [
        make_record(asset_code="A1", serial_number="S1", created_at="2025-06-01T08:00:00.000+00:00"),
        make_record(
            asset_code="B2",
            serial_number="S2",
            asset_name="Projector",
            custodian="Tuya",
            created_at="2025-06-03T08:00:00.000+00:00",
        ),
        make_record(asset_code="C3", serial_number="S3", created_at="2025-06-02T08:00:00.000+00:00"),
    ]
    store.replace_all(records)
    return records


def test_list_history_newest_first(store, seeded) -> None:
    assert [r.asset_code for r in list_history(store)] == ["B2", "C3", "A1"]


def test_list_history_search_is_case_insensitive(store, seeded) -> None:
    assert [r.asset_code for r in list_history(store, "projector")] == ["B2"]
    assert [r.asset_code for r in list_history(store, "TUYA")] == ["B2"]
    assert [r.asset_code for r in list_history(store, "s3")] == ["C3"]
    assert list_history(store, "nothing-matches") == []
    assert len(list_history(store, "   ")) == 3


def test_delete_selected_records(store, seeded) -> None:
    removed = delete_records(store, BusyFlag(), [identity_of(seeded[0]), identity_of(seeded[2]), "missing|x|y"])
    assert removed == 2
    assert [r.asset_code for r in store.load()] == ["B2"]


def test_delete_nothing_selected(store, seeded) -> None:
    assert delete_records(store, BusyFlag(), []) == 0
    assert len(store.load()) == 3


def test_delete_refused_while_busy(store, seeded) -> None:
    busy = BusyFlag()
    with busy.hold("sync"):
        with pytest.raises(StoreBusy):
            delete_records(store, busy, [identity_of(seeded[0])])
    assert len(store.load()) == 3


def test_clear_history(store, seeded) -> None:
    assert clear_history(store, BusyFlag()) == 3
    assert store.load() == []


def test_export_records_json_and_filename(seeded) -> None:
    bundle = export_records(seeded[:2], now=datetime(2025, 6, 30, 17, 5, 9))
    assert bundle.filename == "asset-export_20250630_170509.json"
    assert bundle.count == 2
    exported = json.loads(bundle.content)
    assert [entry["assetCode"] for entry in exported] == ["A1", "B2"]
    assert exported[1]["assetName"] == "Projector"


def test_write_export_avoids_overwrite(tmp_path, seeded) -> None:
    bundle = export_records(seeded, now=datetime(2025, 6, 30, 17, 5, 9))
    first = write_export(bundle, tmp_path / "exports")
    second = write_export(bundle, tmp_path / "exports")
    assert first.name == "asset-export_20250630_170509.json"
    assert second.name == "asset-export_20250630_170509_1.json"
    assert json.loads(second.read_bytes()) == json.loads(first.read_bytes())
