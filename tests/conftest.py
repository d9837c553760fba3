"""Shared fixtures keeping PUBLIC state and audit events isolated per test."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from envpatrol.services.budget_audit import clear_budget_events

_TUNING_ENV = (
    "ENVPATROL_MAX_INPUT_BYTES",
    "ENVPATROL_MAX_LINES",
    "ENVPATROL_MAX_LINE_LENGTH",
    "ENVPATROL_MAX_JSON_DEPTH",
    "ENVPATROL_NORMALIZE_DUPLICATES",
    "ENVPATROL_NORMALIZE_MISSING_EQUALS",
    "ENVPATROL_AUDIT_DIR",
    "ENVPATROL_AUDIT_MAX_BYTES",
)


@pytest.fixture(autouse=True)
def isolated_state(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Iterator[Path]:
    """Point scan history and audit output at a throwaway directory."""

    state = tmp_path / "state"
    monkeypatch.setenv("ENVPATROL_STATE_DIR", str(state))
    for name in _TUNING_ENV:
        monkeypatch.delenv(name, raising=False)
    clear_budget_events()
    yield state
    clear_budget_events()
