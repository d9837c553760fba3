"""Core entities without I/O for EnvPatrol."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    """Risk tiers for content findings plus the two structural tiers."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    ERROR_FORMAT = "error_format"
    WARNING_FORMAT = "warning_format"

    @property
    def is_structural(self) -> bool:
        return self in (Severity.ERROR_FORMAT, Severity.WARNING_FORMAT)

    def downgrade(self) -> "Severity":
        """Return the next lower content tier (critical->high, high->medium)."""

        if self is Severity.CRITICAL:
            return Severity.HIGH
        if self is Severity.HIGH:
            return Severity.MEDIUM
        return self


@dataclass(frozen=True)
class Finding:
    """One reported issue, located by line (dotenv) or dotted path (JSON)."""

    key: str
    severity: Severity
    message: str
    penalty: int = 0
    line: int | None = None
    path: str | None = None

    def to_mapping(self) -> dict[str, object]:
        mapping: dict[str, object] = {
            "key": self.key,
            "severity": self.severity.value,
            "message": self.message,
            "penalty": self.penalty,
        }
        if self.line is not None:
            mapping["line"] = self.line
        if self.path is not None:
            mapping["path"] = self.path
        return mapping


@dataclass(frozen=True)
class ScanResult:
    """Score, ordered findings and detected format for a single scan."""

    score: int
    findings: tuple[Finding, ...]
    format: str
    aborted: "ScanAbortReason | None" = None

    @property
    def structural_count(self) -> int:
        return sum(1 for finding in self.findings if finding.severity.is_structural)

    def to_mapping(self) -> dict[str, object]:
        mapping: dict[str, object] = {
            "score": self.score,
            "format": self.format,
            "findings": [finding.to_mapping() for finding in self.findings],
        }
        if self.aborted is not None:
            mapping["aborted"] = self.aborted.value
        return mapping


class ScanAbortReason(Enum):
    """Enumerate the complexity limits that can abort a scan."""

    MAX_INPUT_BYTES = "MAX_INPUT_BYTES"
    MAX_LINES = "MAX_LINES"
    MAX_LINE_LENGTH = "MAX_LINE_LENGTH"
    MAX_JSON_DEPTH = "MAX_JSON_DEPTH"
