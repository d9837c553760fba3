"""Business rules to keep secret values out of stored and public text."""

from __future__ import annotations

import re
from typing import Any, Mapping

from ..domain.models import Finding
from .dotenv_analyzer import MISSING_EQUALS_MESSAGE
from .dotenv_syntax import ANNOTATION_PATTERN, SEPARATOR_PATTERN, parse_value
from .format_detector import detect_format
from .json_analyzer import JSON_FORMAT

REDACTED = "[redacted]"

COMMENT_VALUE_PATTERN = re.compile(r"=(?=.*\S).*")
"""Everything after the first ``=`` of free text, when anything follows it."""

JSON_STRING_PATTERN = re.compile(r'"(?:[^"\\\n]|\\.)*"(\s*:)?')
"""A JSON string literal; the group is set when the string is an object key."""

BARE_VALUE_PATTERN = re.compile(r"""([:=][ \t]*)(?!["\[{\s])[^,}\]\n"]+""")
"""Unquoted scalar after ``:`` or ``=`` in JSON and near-JSON text."""

AWS_KEY_ID_PATTERN = re.compile(r"\b(?:AKIA|ASIA|ACCA)[A-Z0-9]{12,16}\b")
"""Access key ids can appear anywhere, not only after a separator."""

PEM_BEGIN_PATTERN = re.compile(r"-----BEGIN [A-Z ]*PRIVATE KEY-----")
PEM_END_PATTERN = re.compile(r"-----END [A-Z ]*PRIVATE KEY-----")


def redact_config_text(text: str) -> str:
    """Replace every value, stray content line and key material with a marker.

    Dotenv text is tokenized exactly like the analyzer reads it, so a value is
    redacted as a whole. JSON text keeps its keys and structure.
    """

    redact_line = _redact_json_line
    if detect_format(text) != JSON_FORMAT:
        redact_line = _redact_dotenv_line

    redacted_lines: list[str] = []
    inside_pem = False
    for line in text.split("\n"):
        if inside_pem:
            redacted_lines.append(REDACTED)
            inside_pem = not PEM_END_PATTERN.search(line)
            continue
        if PEM_BEGIN_PATTERN.search(line) and not PEM_END_PATTERN.search(line):
            inside_pem = True
        redacted_lines.append(_scrub_markers(redact_line(line)))
    return "\n".join(redacted_lines)


def _redact_dotenv_line(line: str) -> str:
    trimmed = line.strip()
    if not trimmed or SEPARATOR_PATTERN.match(trimmed):
        return line
    if trimmed.startswith("#") or ANNOTATION_PATTERN.match(trimmed):
        return _redact_free_text(line)

    separator = line.find("=")
    if separator == -1:
        return REDACTED
    token = parse_value(line[separator + 1:])
    rendered = line[: separator + 1]
    if token.value or token.quoted:
        rendered += REDACTED
    if token.comment is not None:
        rendered += f" #{_redact_free_text(token.comment)}"
    return rendered


def _redact_json_line(line: str) -> str:
    scrubbed = JSON_STRING_PATTERN.sub(_redact_json_string, line)
    return BARE_VALUE_PATTERN.sub(lambda m: m.group(1) + REDACTED, scrubbed)


def _redact_json_string(match: re.Match[str]) -> str:
    if match.group(1) is not None:
        return match.group(0)
    return f'"{REDACTED}"'


def _redact_free_text(text: str) -> str:
    return COMMENT_VALUE_PATTERN.sub("=" + REDACTED, text, count=1)


def _scrub_markers(line: str) -> str:
    scrubbed = PEM_BEGIN_PATTERN.sub(REDACTED, line)
    return AWS_KEY_ID_PATTERN.sub(REDACTED, scrubbed)


def public_finding_key(finding: Finding) -> str:
    """Key safe to store or print; a line without ``=`` is raw content."""

    if finding.message == MISSING_EQUALS_MESSAGE:
        return REDACTED
    return finding.key


def sanitize_public_response(payload: Mapping[str, Any]) -> dict[str, str]:
    """Return a copy with every value rendered as redacted text."""

    return {
        key: "\n".join(
            _scrub_markers(_redact_free_text(line))
            for line in str(value).split("\n")
        )
        for key, value in payload.items()
    }
