"""Tokenization rules shared by the dotenv analyzer and the normalizer.

Both sides must agree on what a separator, annotation, assignment and quoted
value look like; otherwise normalized output could be flagged by a re-scan.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

SEPARATOR_PATTERN = re.compile(r"^[-_= ]{3,}$")
"""Visual separator lines such as ``-----`` or ``=== ===``."""

ANNOTATION_PATTERN = re.compile(r"^(?:FIXME|TODO|NOTE)\b", re.IGNORECASE)
"""Free-form annotation lines left in configs by humans."""

EXPORT_PATTERN = re.compile(r"^export\s+", re.IGNORECASE)
"""Shell ``export`` prefix in front of an assignment."""

VALID_KEY_PATTERN = re.compile(r"[A-Za-z0-9_]+")
INVALID_KEY_CHAR_PATTERN = re.compile(r"[^A-Za-z0-9_]")

INLINE_COMMENT_PATTERN = re.compile(r"\s#")
"""Start of an inline comment inside an unquoted value."""

LITERAL_NEWLINE = "\\n"
QUOTES = ("'", '"')
BOOLEAN_LITERALS = frozenset({"true", "false"})


@dataclass(frozen=True)
class ValueToken:
    """A raw value split into its semantic part and an optional comment."""

    value: str
    quoted: bool
    literal: str
    comment: str | None = None

    @property
    def is_quoted_boolean(self) -> bool:
        return self.quoted and self.value.lower() in BOOLEAN_LITERALS


def is_noise(trimmed: str) -> bool:
    """Return True for separator and annotation lines, with or without export."""

    if SEPARATOR_PATTERN.match(trimmed) or ANNOTATION_PATTERN.match(trimmed):
        return True
    body = strip_export(trimmed)
    if body == trimmed:
        return False
    return bool(SEPARATOR_PATTERN.match(body) or ANNOTATION_PATTERN.match(body))


def strip_export(line: str) -> str:
    match = EXPORT_PATTERN.match(line)
    if match is None:
        return line
    return line[match.end():]


def is_valid_key(key: str) -> bool:
    return VALID_KEY_PATTERN.fullmatch(key) is not None


def sanitize_key(key: str) -> str:
    return INVALID_KEY_CHAR_PATTERN.sub("_", key)


def split_assignment(body: str) -> tuple[str, str] | None:
    """Split on the first ``=``; the key is trimmed and the value kept raw."""

    if "=" not in body:
        return None
    key, raw_value = body.split("=", 1)
    return key.strip(), raw_value


def _closing_quote(text: str, quote: str) -> int:
    """Index of the quote closing ``text[0]``, or -1. Double quotes honor escapes."""

    index = 1
    while index < len(text):
        char = text[index]
        if char == "\\" and quote == '"':
            index += 2
            continue
        if char == quote:
            return index
        index += 1
    return -1


def parse_value(raw_value: str) -> ValueToken:
    """Tokenize a raw value into quoted or unquoted content plus comment."""

    stripped = raw_value.strip()
    if stripped[:1] in QUOTES:
        end = _closing_quote(stripped, stripped[0])
        if end != -1:
            tail = stripped[end + 1:].strip()
            if not tail or tail.startswith("#"):
                return ValueToken(
                    value=stripped[1:end],
                    quoted=True,
                    literal=stripped[: end + 1],
                    comment=tail[1:] if tail else None,
                )

    match = INLINE_COMMENT_PATTERN.search(raw_value)
    if match is None:
        return ValueToken(value=stripped, quoted=False, literal=stripped)
    value = raw_value[: match.start()].strip()
    comment = raw_value[match.end():].rstrip()
    return ValueToken(value=value, quoted=False, literal=value, comment=comment)


def comment_text(trimmed: str) -> str:
    """Text of a full-line comment without its leading ``#`` markers."""

    return trimmed.lstrip("#")
