"""Ordered catalog of secret/risk patterns applied to key/value pairs.

The catalog is evaluated top to bottom and the first matching pattern wins, so
a pair is never penalized twice. Every regex here is either anchored or a
literal alternation to keep matching linear in the input length.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..domain.models import Severity


@dataclass(frozen=True)
class Pattern:
    """A catalog rule: matches when either the key or the value matcher hits."""

    severity: Severity
    message: str
    key_matcher: re.Pattern[str] | None = None
    value_matcher: re.Pattern[str] | None = None

    def matches(self, key: str, value: str) -> bool:
        if self.key_matcher is not None and self.key_matcher.search(key):
            return True
        if self.value_matcher is not None and self.value_matcher.search(value):
            return True
        return False


AWS_ACCESS_KEY_ID_PATTERN = re.compile(r"^(?:AKIA|ASIA|ACCA)[A-Z0-9]{12,16}$")
"""Shape of an AWS access key id value."""

PRIVATE_KEY_HEADER_PATTERN = re.compile(
    r"-----BEGIN (?:RSA |EC |DSA |OPENSSH |ENCRYPTED )?PRIVATE KEY-----"
)
"""PEM header that opens private-key material."""

JWT_VALUE_PATTERN = re.compile(
    r"^eyJ[A-Za-z0-9_-]{8,}\.[A-Za-z0-9_-]{8,}\.[A-Za-z0-9_-]{8,}$"
)
"""Three base64url segments starting with an encoded JSON header."""

CATALOG: tuple[Pattern, ...] = (
    Pattern(
        severity=Severity.CRITICAL,
        message="possible AWS credential",
        key_matcher=re.compile(
            r"aws_?(?:access_?key_?id|secret_?access_?key|session_?token)",
            re.IGNORECASE,
        ),
        value_matcher=AWS_ACCESS_KEY_ID_PATTERN,
    ),
    Pattern(
        severity=Severity.HIGH,
        message="token, secret or private key in plain text",
        key_matcher=re.compile(
            r"token|secret|private_?key|api_?key|jwt|credential", re.IGNORECASE
        ),
        value_matcher=re.compile(
            PRIVATE_KEY_HEADER_PATTERN.pattern + "|" + JWT_VALUE_PATTERN.pattern
        ),
    ),
    Pattern(
        severity=Severity.HIGH,
        message="password-like key",
        key_matcher=re.compile(r"passw(?:or)?d|pwd|passphrase", re.IGNORECASE),
    ),
    Pattern(
        severity=Severity.MEDIUM,
        message="database credential or connection string",
        key_matcher=re.compile(
            r"database_?url|db_?(?:url|uri|user(?:name)?|host|conn\w*)"
            r"|(?:postgres|pg|mysql|mongo(?:db)?|redis)_?(?:url|uri|user(?:name)?|dsn)"
            r"|dsn|connection_?string",
            re.IGNORECASE,
        ),
    ),
    Pattern(
        severity=Severity.LOW,
        message="debug or verbose setting",
        key_matcher=re.compile(r"debug|log_?level|trace|verbose", re.IGNORECASE),
    ),
)
"""Catalog in priority order; first match wins."""


def match_pattern(key: str, value: str) -> Pattern | None:
    """Return the first catalog pattern matching the pair, if any."""

    for pattern in CATALOG:
        if pattern.matches(key, value):
            return pattern
    return None
