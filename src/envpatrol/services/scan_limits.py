"""Configurable complexity budget for scans and normalization."""

from __future__ import annotations

import os
from dataclasses import dataclass

from ..domain.models import ScanAbortReason

DEFAULT_MAX_INPUT_BYTES = 1_048_576
"""Largest UTF-8 payload accepted by a single scan."""

DEFAULT_MAX_LINES = 20_000
"""Cap on the number of lines tokenized in a dotenv payload."""

DEFAULT_MAX_LINE_LENGTH = 16_384
"""Cap on a single line, which bounds per-line regex work."""

DEFAULT_MAX_JSON_DEPTH = 64
"""Cap on object/array nesting walked by the JSON analyzer."""


class ScanBudgetExceeded(ValueError):
    """Raised when an input exceeds one of the configured complexity limits."""

    def __init__(self, reason: ScanAbortReason, observed: int) -> None:
        super().__init__(f"Input exceeds the {reason.value} limit.")
        self.reason = reason
        self.observed = observed


def _env_int(
    name: str,
    default: int,
    *,
    min_value: int = 0,
    max_value: int | None = None,
) -> int:
    """Return a bounded integer limit sourced from the environment."""

    raw = os.getenv(name)
    if not raw or not raw.strip():
        return default
    try:
        parsed = int(raw)
    except ValueError:
        return default
    if parsed < min_value:
        return default
    if max_value is not None and parsed > max_value:
        return max_value
    return parsed


@dataclass(frozen=True)
class ScanLimitConfig:
    """Every limit a scan is checked against."""

    max_input_bytes: int
    max_lines: int
    max_line_length: int
    max_json_depth: int

    @classmethod
    def from_env(cls) -> "ScanLimitConfig":
        return cls(
            max_input_bytes=_env_int(
                "ENVPATROL_MAX_INPUT_BYTES", DEFAULT_MAX_INPUT_BYTES, min_value=1
            ),
            max_lines=_env_int("ENVPATROL_MAX_LINES", DEFAULT_MAX_LINES, min_value=1),
            max_line_length=_env_int(
                "ENVPATROL_MAX_LINE_LENGTH", DEFAULT_MAX_LINE_LENGTH, min_value=1
            ),
            # The JSON walker recurses, so keep well clear of the interpreter limit.
            max_json_depth=_env_int(
                "ENVPATROL_MAX_JSON_DEPTH",
                DEFAULT_MAX_JSON_DEPTH,
                min_value=1,
                max_value=256,
            ),
        )

    def check_size(self, text: str) -> None:
        """Raise :class:`ScanBudgetExceeded` when the payload is too large."""

        byte_count = len(text.encode("utf-8"))
        if byte_count > self.max_input_bytes:
            raise ScanBudgetExceeded(ScanAbortReason.MAX_INPUT_BYTES, byte_count)

    def check_lines(self, lines: list[str]) -> None:
        """Raise :class:`ScanBudgetExceeded` for too many or too long lines.

        Only line-oriented input is checked; minified JSON is a single long line.
        """

        if len(lines) > self.max_lines:
            raise ScanBudgetExceeded(ScanAbortReason.MAX_LINES, len(lines))
        longest = max((len(line) for line in lines), default=0)
        if longest > self.max_line_length:
            raise ScanBudgetExceeded(ScanAbortReason.MAX_LINE_LENGTH, longest)

    def as_mapping(self) -> dict[str, int]:
        return {
            "max_input_bytes": self.max_input_bytes,
            "max_lines": self.max_lines,
            "max_line_length": self.max_line_length,
            "max_json_depth": self.max_json_depth,
        }


DEFAULT_SCAN_LIMITS = ScanLimitConfig(
    DEFAULT_MAX_INPUT_BYTES,
    DEFAULT_MAX_LINES,
    DEFAULT_MAX_LINE_LENGTH,
    DEFAULT_MAX_JSON_DEPTH,
)
