"""Best-effort canonical rewrite of dotenv and JSON configuration text.

The normalizer tokenizes exactly like the analyzers, so a re-scan of its output
never reports more structural findings than the original text. It is
idempotent: ``normalize(normalize(x)) == normalize(x)``.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass

from ..domain.models import ScanAbortReason
from .budget_audit import record_budget_event
from .dotenv_syntax import (
    LITERAL_NEWLINE,
    is_noise,
    parse_value,
    sanitize_key,
    split_assignment,
    strip_export,
)
from .format_detector import detect_format, is_blank, strip_bom
from .json_analyzer import JSON_FORMAT, load_json
from .near_json import rewrite_near_json
from .scan_limits import ScanBudgetExceeded, ScanLimitConfig

_LOG = logging.getLogger(__name__)

KEEP_FIRST = "first"
KEEP_LAST = "last"
DUPLICATE_POLICIES = frozenset({KEEP_FIRST, KEEP_LAST})

DROP = "drop"
ANNOTATE = "annotate"
MISSING_EQUALS_POLICIES = frozenset({DROP, ANNOTATE})

ANNOTATION_PREFIX = "# FIXME: "


def _env_choice(name: str, allowed: frozenset[str], default: str) -> str:
    raw = (os.getenv(name) or "").strip().lower()
    return raw if raw in allowed else default


@dataclass(frozen=True)
class NormalizerConfig:
    """Policies for the two rewrites where either behavior is reasonable.

    ``duplicates`` keeps the first (default) or last occurrence of a key;
    ``missing_equals`` drops (default) or annotates lines without ``=``.
    """

    duplicates: str = KEEP_FIRST
    missing_equals: str = DROP

    def __post_init__(self) -> None:
        if self.duplicates not in DUPLICATE_POLICIES:
            raise ValueError(f"Unknown duplicate policy: {self.duplicates!r}")
        if self.missing_equals not in MISSING_EQUALS_POLICIES:
            raise ValueError(f"Unknown missing '=' policy: {self.missing_equals!r}")

    @classmethod
    def from_env(cls) -> "NormalizerConfig":
        return cls(
            duplicates=_env_choice(
                "ENVPATROL_NORMALIZE_DUPLICATES", DUPLICATE_POLICIES, KEEP_FIRST
            ),
            missing_equals=_env_choice(
                "ENVPATROL_NORMALIZE_MISSING_EQUALS", MISSING_EQUALS_POLICIES, DROP
            ),
        )


def normalize(
    text: str,
    config: NormalizerConfig | None = None,
    limits: ScanLimitConfig | None = None,
) -> str:
    """Return the canonical rewrite of ``text``.

    Blank input yields an empty string and over-budget input is returned
    unchanged, so the function never raises.
    """

    if is_blank(text):
        return ""

    config = config or NormalizerConfig.from_env()
    limits = limits or ScanLimitConfig.from_env()
    payload = strip_bom(text)
    try:
        limits.check_size(payload)
        if detect_format(payload) == JSON_FORMAT:
            return _normalize_json(payload)
        lines = payload.split("\n")
        limits.check_lines(lines)
        return _normalize_dotenv(lines, config)
    except ScanBudgetExceeded as exc:
        _LOG.warning("Normalization skipped: %s", exc)
        record_budget_event(
            reason=exc.reason.value,
            operation="normalize",
            limits=limits.as_mapping(),
            observed=exc.observed,
        )
        return text


# JSON branch


def _normalize_json(payload: str) -> str:
    try:
        document = load_json(payload)
    except ScanBudgetExceeded:
        raise
    except ValueError:
        document = rewrite_near_json(payload)
        if document is None:
            _LOG.debug("Payload is not JSON the rewrite understands")
            return _clean_whitespace(payload)
        _LOG.debug("Rewrote near-JSON payload with %d keys", len(document))

    try:
        rendered = json.dumps(
            document, indent=2, ensure_ascii=False, allow_nan=False
        )
    except ValueError:
        return _clean_whitespace(payload)
    except RecursionError as exc:
        raise ScanBudgetExceeded(ScanAbortReason.MAX_JSON_DEPTH, -1) from exc
    return rendered + "\n"


def _clean_whitespace(payload: str) -> str:
    return _finalize([line.rstrip() for line in payload.split("\n")])


# Dotenv branch


def _normalize_dotenv(lines: list[str], config: NormalizerConfig) -> str:
    entries = [_normalize_line(line.rstrip(), config) for line in lines]
    if config.duplicates == KEEP_LAST:
        kept = _keep_last(entries)
    else:
        kept = _keep_first(entries)
    return _finalize(kept)


def _normalize_line(
    line: str, config: NormalizerConfig
) -> tuple[str | None, str | None]:
    """Return ``(dedupe key, rendered line)``; a ``None`` line is dropped."""

    trimmed = line.strip()
    if not trimmed:
        return None, ""
    if trimmed.startswith("#"):
        return None, line
    if trimmed.startswith("//"):
        return None, ("# " + trimmed[2:].strip()).rstrip()
    if is_noise(trimmed):
        return None, ""

    assignment = split_assignment(strip_export(trimmed))
    if assignment is None:
        if config.missing_equals == ANNOTATE:
            return None, ANNOTATION_PREFIX + trimmed
        _LOG.debug("Dropping line without '=': %d characters", len(trimmed))
        return None, None

    raw_key, raw_value = assignment
    key = sanitize_key(raw_key)
    if not key:
        return None, None
    rendered = f"{key}={_normalize_value(raw_value)}"
    if is_noise(rendered):
        return None, ""
    return key.upper(), rendered


def _normalize_value(raw_value: str) -> str:
    token = parse_value(raw_value)
    if token.is_quoted_boolean:
        rendered = token.value
    elif token.quoted:
        rendered = token.literal
    elif _needs_quotes(token.value):
        rendered = quote_value(token.value)
    else:
        rendered = token.value
    if token.comment is not None:
        rendered = f"{rendered} #{token.comment}"
    return rendered


def _needs_quotes(value: str) -> bool:
    return (
        any(char.isspace() for char in value)
        or "#" in value
        or LITERAL_NEWLINE in value
    )


def quote_value(value: str) -> str:
    """Wrap ``value`` in quotes the dotenv tokenizer reads back verbatim."""

    if '"' not in value and not value.endswith("\\"):
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    return json.dumps(value, ensure_ascii=False)


def _keep_first(entries: list[tuple[str | None, str | None]]) -> list[str]:
    seen: set[str] = set()
    kept: list[str] = []
    for key, line in entries:
        if line is None:
            continue
        if key is not None:
            if key in seen:
                continue
            seen.add(key)
        kept.append(line)
    return kept


def _keep_last(entries: list[tuple[str | None, str | None]]) -> list[str]:
    last_index = {key: index for index, (key, _) in enumerate(entries) if key}
    return [
        line
        for index, (key, line) in enumerate(entries)
        if line is not None and (key is None or last_index[key] == index)
    ]


def _finalize(lines: list[str]) -> str:
    """Collapse blank runs, trim blank edges, end with exactly one newline."""

    collapsed: list[str] = []
    for line in lines:
        if not line and collapsed and not collapsed[-1]:
            continue
        collapsed.append(line)
    text = "\n".join(collapsed).strip("\n")
    return text + "\n" if text else ""
