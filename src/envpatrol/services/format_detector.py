"""Cheap structural sniff choosing between the dotenv and JSON analyzers."""

from __future__ import annotations

import re

from .dotenv_analyzer import DOTENV_FORMAT
from .json_analyzer import JSON_FORMAT

_LEADING_NOISE_PATTERN = re.compile(r"^[\s\ufeff\u200b]+")
"""Whitespace plus byte-order marks and zero-width spaces pasted from editors."""


def strip_leading_noise(text: str) -> str:
    return _LEADING_NOISE_PATTERN.sub("", text)


def detect_format(text: str) -> str:
    """Return ``"json"`` when the first meaningful char opens an object/array."""

    if strip_leading_noise(text)[:1] in ("{", "["):
        return JSON_FORMAT
    return DOTENV_FORMAT


def is_blank(text: str) -> bool:
    return not strip_leading_noise(text)


def strip_bom(text: str) -> str:
    """Drop byte-order marks from the leading run, keeping its whitespace."""

    match = _LEADING_NOISE_PATTERN.match(text)
    if match is None:
        return text
    head = match.group().replace("\ufeff", "").replace("\u200b", "")
    return head + text[match.end():]
