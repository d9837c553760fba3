"""Persistent storage for PUBLIC configuration scan snapshots."""

from __future__ import annotations

import copy
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_STATE_DIR = PROJECT_ROOT / "state" / "public"
STATE_DIR_ENV = "ENVPATROL_STATE_DIR"
RECORD_FILENAME = "scan_history.json"

MAX_STORED_RECORDS = 50
"""Maximum number of scan snapshots to retain."""


def state_dir() -> Path:
    """Directory holding PUBLIC state, overridable via ``ENVPATROL_STATE_DIR``."""

    configured = os.getenv(STATE_DIR_ENV)
    if configured and configured.strip():
        return Path(configured)
    return DEFAULT_STATE_DIR


def _record_file() -> Path:
    return state_dir() / RECORD_FILENAME


def _load_records() -> list[Mapping[str, Any]]:
    record_file = _record_file()
    if not record_file.exists():
        return []
    try:
        return json.loads(record_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return []


def _save_records(records: list[Mapping[str, Any]]) -> None:
    record_file = _record_file()
    record_file.parent.mkdir(parents=True, exist_ok=True)
    record_file.write_text(
        json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8"
    )


def persist_scan_record(
    *,
    scan_id: str,
    format: str,
    score: int,
    findings: list[Mapping[str, Any]],
    sample: str,
) -> dict[str, Any]:
    """Append a new scan snapshot and enforce retention."""

    record = {
        "scan_id": scan_id,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "format": format,
        "score": score,
        "findings_count": len(findings),
        "findings": [dict(finding) for finding in findings],
        "sample": sample,
    }

    records = _load_records()
    records.append(record)
    if len(records) > MAX_STORED_RECORDS:
        records = records[-MAX_STORED_RECORDS:]
    _save_records(records)
    return record


def list_scans(limit: int | None = None) -> list[dict[str, Any]]:
    """Return newest-first snapshots respecting the configured limit."""

    records = _load_records()
    newest = list(reversed(records))
    if limit is None:
        limit = MAX_STORED_RECORDS
    else:
        limit = max(min(limit, MAX_STORED_RECORDS), 0)
    limited = newest[:limit]
    return [copy.deepcopy(record) for record in limited]


def get_scan(scan_id: str) -> dict[str, Any] | None:
    """Retrieve a single snapshot by scan_id."""

    for record in _load_records():
        if record.get("scan_id") == scan_id:
            return copy.deepcopy(record)
    return None


def clear_records() -> None:
    """Remove any persisted scan snapshots (useful for tests)."""

    record_file = _record_file()
    if record_file.exists():
        record_file.unlink()
