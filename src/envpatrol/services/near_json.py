"""Best-effort rewrite of "almost JSON" text into valid JSON.

This is deliberately not a parser. It handles the common case of a flat block
such as ``{ name = demo, port: 8080 }`` written with bare identifiers:

* one entry per comma- or newline-separated chunk;
* bare or quoted keys, sanitized to ``[A-Za-z0-9_]``;
* ``=`` accepted in place of ``:``;
* JSON literals, numbers and JSON strings kept, single-quoted and bare scalars
  turned into JSON strings.

Nested objects or arrays, and values whose commas or quotes break the chunking,
make the rewrite give up and return ``None``; the caller then falls back to a
whitespace-only cleanup.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

from .dotenv_syntax import sanitize_key
from .json_analyzer import load_json

_CHUNK_SEPARATOR = re.compile(r"[,\n]")
_ENTRY_PATTERN = re.compile(r"""^["']?([^"'=:\s]+)["']?\s*[:=]\s*(.*)$""")
_JSON_LITERALS = frozenset({"true", "false", "null"})


class _Unsupported(ValueError):
    """Raised internally when a chunk falls outside the supported subset."""


def rewrite_near_json(text: str) -> dict[str, Any] | None:
    """Return the object described by ``text``, or ``None`` when unsupported."""

    stripped = text.strip()
    if not (stripped.startswith("{") and stripped.endswith("}")):
        return None

    document: dict[str, Any] = {}
    try:
        for chunk in _CHUNK_SEPARATOR.split(stripped[1:-1]):
            chunk = chunk.strip()
            if not chunk:
                continue
            key, value = _parse_entry(chunk)
            document[key] = value
    except _Unsupported:
        return None
    return document


def _parse_entry(chunk: str) -> tuple[str, Any]:
    match = _ENTRY_PATTERN.match(chunk)
    if match is None:
        raise _Unsupported(chunk)
    key = sanitize_key(match.group(1))
    return key, _coerce_value(match.group(2).strip())


def _coerce_value(raw: str) -> Any:
    if not raw:
        return ""
    if raw[0] in "{[":
        raise _Unsupported(raw)
    if raw in _JSON_LITERALS:
        return json.loads(raw)
    if raw[0] == '"':
        try:
            value = json.loads(raw)
        except ValueError as exc:
            raise _Unsupported(raw) from exc
        if not isinstance(value, str):
            raise _Unsupported(raw)
        return value
    if raw[0] == "'":
        if len(raw) < 2 or raw[-1] != "'" or "'" in raw[1:-1]:
            raise _Unsupported(raw)
        return raw[1:-1]
    number = _as_number(raw)
    if number is not None:
        return number
    return raw


def _as_number(raw: str) -> int | float | None:
    try:
        value = load_json(raw)
    except ValueError:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value
