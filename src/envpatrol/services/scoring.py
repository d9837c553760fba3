"""Penalty table and the clamped score accumulator shared by both analyzers."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from ..domain.models import Finding, Severity

MAX_SCORE = 100
MIN_SCORE = 0

SEVERITY_PENALTIES: Mapping[Severity, int] = MappingProxyType(
    {
        Severity.CRITICAL: 20,
        Severity.HIGH: 10,
        Severity.MEDIUM: 5,
        Severity.LOW: 2,
    }
)
"""Penalty per content tier. Structural rules carry their own fixed penalties."""

LEADING_WHITESPACE_PENALTY = 2
MISSING_EQUALS_PENALTY = 5
INVALID_KEY_PENALTY = 2
DUPLICATE_KEY_PENALTY = 2
UNQUOTED_SPACES_PENALTY = 1
LITERAL_NEWLINE_PENALTY = 1
COMMENTED_SECRET_PENALTY = 3
INVALID_JSON_PENALTY = 20


def clamp_score(value: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, value))


class ScoreAccumulator:
    """Collect findings in detection order and the points they cost."""

    def __init__(self) -> None:
        self._findings: list[Finding] = []
        self._deducted = 0

    def add(self, finding: Finding) -> None:
        self._findings.append(finding)
        self._deducted += finding.penalty

    @property
    def findings(self) -> tuple[Finding, ...]:
        return tuple(self._findings)

    @property
    def score(self) -> int:
        return clamp_score(MAX_SCORE - self._deducted)
