"""JSONL audit sink for PUBLIC EnvPatrol events.

Events never carry scanned content; callers pass counts and limits only. Write
failures are logged as rate-limited warnings and never reach the caller.
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path

from .scan_history_store import state_dir

_LOG = logging.getLogger(__name__)

AUDIT_DIR_ENV = "ENVPATROL_AUDIT_DIR"
AUDIT_MAX_BYTES_ENV = "ENVPATROL_AUDIT_MAX_BYTES"
AUDIT_FILENAME = "audit.jsonl"
DEFAULT_MAX_AUDIT_BYTES = 1_000_000
DEFAULT_WARNING_INTERVAL_SECONDS = 60.0


def _parse_max_bytes(raw: str | None) -> int | None:
    """Byte budget before rotation; zero or negative disables rotation."""

    if not raw or not raw.strip():
        return DEFAULT_MAX_AUDIT_BYTES
    try:
        parsed = int(raw)
    except ValueError:
        return DEFAULT_MAX_AUDIT_BYTES
    return parsed if parsed > 0 else None


@dataclass(frozen=True)
class AuditConfig:
    """Where audit events go and when the file rotates."""

    audit_file: Path
    max_bytes: int | None

    @classmethod
    def from_env(cls) -> "AuditConfig":
        base_dir = Path(os.getenv(AUDIT_DIR_ENV) or state_dir())
        return cls(
            audit_file=base_dir / AUDIT_FILENAME,
            max_bytes=_parse_max_bytes(os.getenv(AUDIT_MAX_BYTES_ENV)),
        )


class WarningLimiter:
    """Emit at most one warning per key within ``interval`` seconds."""

    def __init__(self, interval: float = DEFAULT_WARNING_INTERVAL_SECONDS) -> None:
        self.interval = interval
        self._last: dict[str, float] = {}

    def allow(self, key: str) -> bool:
        if self.interval <= 0:
            return True
        now = time.monotonic()
        last = self._last.get(key)
        if last is not None and now - last < self.interval:
            return False
        self._last[key] = now
        return True

    def reset(self) -> None:
        self._last.clear()


class JsonlAuditSink:
    """Append-only JSONL file with single-backup rotation."""

    def __init__(self, config: AuditConfig, limiter: WarningLimiter) -> None:
        self.config = config
        self._limiter = limiter

    def append(self, event: dict[str, object]) -> None:
        path = self.config.audit_file
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self._warn(
                "mkdir", "Unable to create audit directory %s: %s", path.parent, exc
            )
            return

        self._rotate_if_needed(path)
        try:
            with path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(event, ensure_ascii=False) + "\n")
        except OSError as exc:
            self._warn("write", "Unable to write audit event to %s: %s", path, exc)

    def _rotate_if_needed(self, path: Path) -> None:
        max_bytes = self.config.max_bytes
        if max_bytes is None or not path.exists():
            return
        try:
            if path.stat().st_size < max_bytes:
                return
            backup = path.with_name(path.name + ".1")
            if backup.exists():
                backup.unlink()
            path.rename(backup)
        except OSError as exc:
            self._warn("rotate", "Unable to rotate audit log %s: %s", path, exc)

    def _warn(self, key: str, message: str, *args: object) -> None:
        if self._limiter.allow(key):
            _LOG.warning(message, *args)


_LIMITER = WarningLimiter()
_CUSTOM_CONFIG: AuditConfig | None = None


def set_audit_config(config: AuditConfig | None) -> None:
    """Pin the audit config (tests); ``None`` reverts to the environment."""

    global _CUSTOM_CONFIG
    _CUSTOM_CONFIG = config


def reset_audit_config() -> None:
    set_audit_config(None)


def set_audit_warning_interval(seconds: float | None) -> None:
    """Adjust the warning rate limit; ``None`` disables rate limiting."""

    _LIMITER.interval = 0.0 if seconds is None else max(seconds, 0.0)


def reset_audit_warning_state() -> None:
    _LIMITER.reset()


def append_audit_event(event: dict[str, object]) -> None:
    """Append one serialized event to the PUBLIC audit log."""

    config = _CUSTOM_CONFIG or AuditConfig.from_env()
    JsonlAuditSink(config, _LIMITER).append(event)
