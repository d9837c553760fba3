"""Contract tests for the PUBLIC scan history resources."""

from __future__ import annotations

import json

import pytest

from envpatrol.mcp import reason_codes, schema_registry, server
from envpatrol.services import scan_history_store


@pytest.fixture(autouse=True)
def clean_scan_records() -> None:
    """Ensure scan snapshots are isolated between tests."""

    scan_history_store.clear_records()
    yield
    scan_history_store.clear_records()


def _run_scan(content: str) -> str:
    resource = server.RESOURCE_REGISTRY["public://config/scan"]
    response = resource({"content": content})
    assert response["persisted"] is True
    return response["scan_id"]


def test_scans_list_returns_newest_first() -> None:
    scan_ids = [_run_scan(f"APP_NAME=demo{index}\n") for index in range(3)]
    resource = server.RESOURCE_REGISTRY["public://config/scans"]
    response = resource({})

    schema_registry.validate("config_scans_list_response_v0.1", response)
    assert response["count"] == 3
    assert response["max_records"] == scan_history_store.MAX_STORED_RECORDS
    assert [item["scan_id"] for item in response["scans"]] == list(reversed(scan_ids))


@pytest.mark.parametrize(
    ("request_limit", "expected"),
    [({"limit": 2}, 2), ({"limit": "1"}, 1), ({"limit": "many"}, 3), (None, 3)],
)
def test_scans_list_limit(request_limit: dict | None, expected: int) -> None:
    for index in range(3):
        _run_scan(f"PORT={index}\n")

    response = server.RESOURCE_REGISTRY["public://config/scans"](request_limit)

    assert response["count"] == expected


def test_scan_get_returns_stored_record() -> None:
    scan_id = _run_scan("DEBUG=true\nAPI_KEY=supersecret\n")
    resource = server.RESOURCE_REGISTRY["public://config/scan/{scan_id}"]
    response = resource({"scan_id": scan_id})

    schema_registry.validate("config_scan_get_response_v0.1", response)
    record = response["scan"]
    assert record["scan_id"] == scan_id
    assert record["score"] == 88
    assert record["findings_count"] == 2
    assert record["sample"] == "DEBUG=[redacted]\nAPI_KEY=[redacted]\n"
    assert "supersecret" not in json.dumps(response)


def test_stored_record_never_keeps_raw_lines() -> None:
    scan_id = _run_scan("DB_PASSWORD=correct horse battery\npassword hunter2secret\n")
    resource = server.RESOURCE_REGISTRY["public://config/scan/{scan_id}"]
    response = resource({"scan_id": scan_id})

    schema_registry.validate("config_scan_get_response_v0.1", response)
    rendered = json.dumps(response)
    for fragment in ("horse", "battery", "hunter2secret"):
        assert fragment not in rendered
    record = response["scan"]
    assert record["sample"] == "DB_PASSWORD=[redacted]\n[redacted]\n"
    assert "[redacted]" in [finding["key"] for finding in record["findings"]]


def test_scan_get_unknown_and_missing_ids() -> None:
    resource = server.RESOURCE_REGISTRY["public://config/scan/{scan_id}"]

    missing = resource({"scan_id": "0" * 32})
    assert missing["status"] == "error"
    assert missing["reason"] == reason_codes.RECORD_NOT_FOUND

    invalid = resource({})
    assert invalid["reason"] == reason_codes.INVALID_INPUT


def test_dry_scans_are_not_persisted() -> None:
    response = server.RESOURCE_REGISTRY["public://config/scan"](
        {"content": "A=1\n", "persist": False}
    )

    assert response["persisted"] is False
    assert scan_history_store.list_scans() == []
    assert scan_history_store.get_scan(response["scan_id"]) is None


def test_retention_keeps_newest_records() -> None:
    total = scan_history_store.MAX_STORED_RECORDS + 2
    for index in range(total):
        scan_history_store.persist_scan_record(
            scan_id=f"scan-{index}", format="dotenv", score=100, findings=[], sample=""
        )

    stored = scan_history_store.list_scans()
    assert len(stored) == scan_history_store.MAX_STORED_RECORDS
    assert stored[0]["scan_id"] == f"scan-{total - 1}"
    assert scan_history_store.get_scan("scan-0") is None
    assert scan_history_store.list_scans(limit=-4) == []


def test_records_live_under_state_dir(isolated_state) -> None:
    _run_scan("A=1\n")

    assert (isolated_state / scan_history_store.RECORD_FILENAME).exists()
