"""Line-oriented analyzer for dotenv style ``KEY=VALUE`` configuration."""

from __future__ import annotations

import re
from typing import Iterator

from ..domain.models import Finding, ScanResult, Severity
from . import scoring
from .dotenv_syntax import (
    LITERAL_NEWLINE,
    ValueToken,
    comment_text,
    is_noise,
    is_valid_key,
    parse_value,
    sanitize_key,
    split_assignment,
    strip_export,
)
from .patterns import match_pattern
from .scan_limits import DEFAULT_SCAN_LIMITS, ScanLimitConfig

DOTENV_FORMAT = "dotenv"

COMMENTED_SECRET_PREFIX = "commented secret detected: "
MISSING_EQUALS_MESSAGE = "missing '=' in assignment"

_COMMENT_KEY_PATTERN = re.compile(r"[A-Z_][A-Z0-9_]+")
_COMMENT_ASSIGNMENT_TAIL = re.compile(
    r"""[ \t]*=[ \t]*(?:"([^"]*)"|'([^']*)'|([^\s#]+))"""
)


def iter_comment_assignments(text: str) -> Iterator[tuple[str, str]]:
    """Yield ``(KEY, value)`` fragments embedded in comment text.

    The scan advances identifier by identifier, so the work stays linear in the
    comment length.
    """

    position = 0
    while True:
        key_match = _COMMENT_KEY_PATTERN.search(text, position)
        if key_match is None:
            return
        tail = _COMMENT_ASSIGNMENT_TAIL.match(text, key_match.end())
        if tail is None:
            position = key_match.end()
            continue
        value = next((group for group in tail.groups() if group is not None), "")
        yield key_match.group(), value
        position = tail.end()


def analyze_dotenv(
    text: str, limits: ScanLimitConfig = DEFAULT_SCAN_LIMITS
) -> ScanResult:
    """Score dotenv text; raises ScanBudgetExceeded for oversized line sets."""

    lines = text.split("\n")
    limits.check_lines(lines)
    accumulator = scoring.ScoreAccumulator()
    seen: set[str] = set()
    for number, line in enumerate(lines, start=1):
        _analyze_line(line.rstrip("\r"), number, seen, accumulator)
    return ScanResult(
        score=accumulator.score,
        findings=accumulator.findings,
        format=DOTENV_FORMAT,
    )


def _analyze_line(
    line: str,
    number: int,
    seen: set[str],
    accumulator: scoring.ScoreAccumulator,
) -> None:
    trimmed = line.strip()
    if not trimmed:
        return
    if trimmed.startswith("#"):
        _check_commented_secrets(comment_text(trimmed), number, accumulator)
        return
    if is_noise(trimmed):
        return

    body = strip_export(trimmed)
    assignment = split_assignment(body)
    if assignment is None:
        accumulator.add(
            Finding(
                key=body,
                severity=Severity.ERROR_FORMAT,
                message=MISSING_EQUALS_MESSAGE,
                penalty=scoring.MISSING_EQUALS_PENALTY,
                line=number,
            )
        )
        return

    raw_key, raw_value = assignment
    if line[:1].isspace():
        accumulator.add(
            Finding(
                key=raw_key,
                severity=Severity.WARNING_FORMAT,
                message="leading spaces before key",
                penalty=scoring.LEADING_WHITESPACE_PENALTY,
                line=number,
            )
        )

    key = raw_key
    if not is_valid_key(raw_key):
        accumulator.add(
            Finding(
                key=raw_key,
                severity=Severity.WARNING_FORMAT,
                message="key contains invalid characters",
                penalty=scoring.INVALID_KEY_PENALTY,
                line=number,
            )
        )
        key = sanitize_key(raw_key)

    token = parse_value(raw_value)
    if key.upper() in seen:
        accumulator.add(
            Finding(
                key=raw_key,
                severity=Severity.WARNING_FORMAT,
                message="duplicate variable",
                penalty=scoring.DUPLICATE_KEY_PENALTY,
                line=number,
            )
        )
    else:
        seen.add(key.upper())
        _check_value(raw_key, key, token, number, accumulator)

    if token.comment:
        _check_commented_secrets(token.comment, number, accumulator)


def _check_value(
    raw_key: str,
    key: str,
    token: ValueToken,
    number: int,
    accumulator: scoring.ScoreAccumulator,
) -> None:
    if not token.quoted and any(char.isspace() for char in token.value):
        accumulator.add(
            Finding(
                key=raw_key,
                severity=Severity.WARNING_FORMAT,
                message="unquoted value contains spaces",
                penalty=scoring.UNQUOTED_SPACES_PENALTY,
                line=number,
            )
        )
    if token.is_quoted_boolean:
        accumulator.add(
            Finding(
                key=raw_key,
                severity=Severity.LOW,
                message="boolean stored as string",
                penalty=scoring.SEVERITY_PENALTIES[Severity.LOW],
                line=number,
            )
        )
    if not token.quoted and LITERAL_NEWLINE in token.value:
        accumulator.add(
            Finding(
                key=raw_key,
                severity=Severity.WARNING_FORMAT,
                message="literal newline without quotes",
                penalty=scoring.LITERAL_NEWLINE_PENALTY,
                line=number,
            )
        )

    pattern = match_pattern(key, token.value)
    if pattern is not None:
        accumulator.add(
            Finding(
                key=raw_key,
                severity=pattern.severity,
                message=pattern.message,
                penalty=scoring.SEVERITY_PENALTIES[pattern.severity],
                line=number,
            )
        )


def _check_commented_secrets(
    text: str, number: int, accumulator: scoring.ScoreAccumulator
) -> None:
    """Report catalog hits hidden in comments one tier lower, at a flat penalty."""

    for key, value in iter_comment_assignments(text):
        pattern = match_pattern(key, value)
        if pattern is None:
            continue
        accumulator.add(
            Finding(
                key=key,
                severity=pattern.severity.downgrade(),
                message=COMMENTED_SECRET_PREFIX + pattern.message,
                penalty=scoring.COMMENTED_SECRET_PENALTY,
                line=number,
            )
        )
