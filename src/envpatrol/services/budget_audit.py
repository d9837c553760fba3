"""Audit trail for scans aborted by the complexity budget."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, MutableSequence, Protocol

from .audit_log import append_audit_event

_LOG = logging.getLogger(__name__)
EVENT_NAME = "CONFIG_SCAN_BUDGET_EXCEEDED"


class BudgetAuditSink(Protocol):
    def emit(self, entry: dict[str, object]) -> None:  # pragma: no cover - trivial
        ...


@dataclass
class InMemoryBudgetAuditSink:
    """Keeps events in memory so tests can inspect them."""

    events: MutableSequence[dict[str, object]]

    def emit(self, entry: dict[str, object]) -> None:
        self.events.append(dict(entry))


class ProductionBudgetAuditSink:
    """Forwards events to the JSONL audit log."""

    __slots__ = ()

    def emit(self, entry: dict[str, object]) -> None:
        try:
            append_audit_event(entry)
        except OSError as exc:
            _LOG.warning("Unable to record budget audit event: %s", exc)


_EVENTS: MutableSequence[dict[str, object]] = []
_IN_MEMORY_SINK = InMemoryBudgetAuditSink(events=_EVENTS)
_PRODUCTION_SINK: BudgetAuditSink | None = ProductionBudgetAuditSink()


def set_production_budget_audit_sink(sink: BudgetAuditSink | None) -> None:
    """Override the production sink; ``None`` keeps events in memory only."""

    global _PRODUCTION_SINK
    _PRODUCTION_SINK = sink


def record_budget_event(
    reason: str,
    operation: str,
    limits: Mapping[str, int],
    observed: int,
) -> None:
    """Record that ``operation`` gave up on an input; no content is included."""

    entry = {
        "event": EVENT_NAME,
        "abort_reason": reason,
        "operation": operation,
        "limits": dict(limits),
        "observed": observed,
    }
    _IN_MEMORY_SINK.emit(entry)
    if _PRODUCTION_SINK is not None:
        _PRODUCTION_SINK.emit(entry)


def get_budget_events() -> list[dict[str, object]]:
    return list(_EVENTS)


def clear_budget_events() -> None:
    _EVENTS.clear()
