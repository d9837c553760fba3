"""Tree-walking analyzer for JSON configuration documents."""

from __future__ import annotations

import json
from typing import Any

from ..domain.models import Finding, ScanAbortReason, ScanResult, Severity
from . import scoring
from .dotenv_syntax import is_valid_key
from .patterns import match_pattern
from .scan_limits import DEFAULT_SCAN_LIMITS, ScanBudgetExceeded, ScanLimitConfig

JSON_FORMAT = "json"
ROOT_PATH = "$"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def load_json(text: str) -> Any:
    """Parse strict JSON: ``NaN`` and ``Infinity`` are rejected.

    Raises :class:`json.JSONDecodeError` (a ``ValueError``) for malformed text
    and :class:`ScanBudgetExceeded` when nesting overflows the interpreter.
    """

    try:
        return json.loads(text, parse_constant=_reject_constant)
    except RecursionError as exc:
        raise ScanBudgetExceeded(ScanAbortReason.MAX_JSON_DEPTH, -1) from exc


def stringify(value: Any) -> str:
    """Text form of a value as seen by the pattern catalog."""

    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    except RecursionError as exc:
        raise ScanBudgetExceeded(ScanAbortReason.MAX_JSON_DEPTH, -1) from exc


def analyze_json(
    text: str, limits: ScanLimitConfig = DEFAULT_SCAN_LIMITS
) -> ScanResult:
    accumulator = scoring.ScoreAccumulator()
    try:
        document = load_json(text)
    except ScanBudgetExceeded:
        raise
    except ValueError as exc:
        accumulator.add(_invalid_json_finding(exc))
        return ScanResult(
            score=accumulator.score,
            findings=accumulator.findings,
            format=JSON_FORMAT,
        )

    _walk(document, [], 0, limits, accumulator)
    return ScanResult(
        score=accumulator.score,
        findings=accumulator.findings,
        format=JSON_FORMAT,
    )


def _invalid_json_finding(exc: ValueError) -> Finding:
    if isinstance(exc, json.JSONDecodeError):
        message = f"invalid JSON: {exc.msg}"
        line = exc.lineno
    else:
        message = f"invalid JSON: {exc}"
        line = None
    return Finding(
        key=ROOT_PATH,
        severity=Severity.ERROR_FORMAT,
        message=message,
        penalty=scoring.INVALID_JSON_PENALTY,
        line=line,
        path=ROOT_PATH,
    )


def _walk(
    node: Any,
    ancestors: list[str],
    depth: int,
    limits: ScanLimitConfig,
    accumulator: scoring.ScoreAccumulator,
) -> None:
    """Visit every object pair; arrays are descended without adding path parts."""

    if depth > limits.max_json_depth:
        raise ScanBudgetExceeded(ScanAbortReason.MAX_JSON_DEPTH, depth)
    if isinstance(node, list):
        for item in node:
            _walk(item, ancestors, depth + 1, limits, accumulator)
        return
    if not isinstance(node, dict):
        return

    for key, value in node.items():
        path = ancestors + [key]
        dotted = ".".join(path)
        if not is_valid_key(key):
            accumulator.add(
                Finding(
                    key=dotted,
                    severity=Severity.WARNING_FORMAT,
                    message="key contains invalid characters",
                    penalty=scoring.INVALID_KEY_PENALTY,
                    path=dotted,
                )
            )
        pattern = match_pattern(key, stringify(value))
        if pattern is not None:
            accumulator.add(
                Finding(
                    key=dotted,
                    severity=pattern.severity,
                    message=pattern.message,
                    penalty=scoring.SEVERITY_PENALTIES[pattern.severity],
                    path=dotted,
                )
            )
        _walk(value, path, depth + 1, limits, accumulator)
