"""Remediation guidance keyed on a finding's severity and key shape."""

from __future__ import annotations

import re

from ..domain.models import Finding, Severity

PRIVATE_KEY_PATTERN = re.compile(r"private_?key|pem|ssh_?key", re.IGNORECASE)
CREDENTIAL_KEY_PATTERN = re.compile(
    r"passw(?:or)?d|pwd|passphrase|token|secret|api_?key|jwt|credential",
    re.IGNORECASE,
)

PRIVATE_KEY_ADVICE = (
    "Move the private key to a secrets manager, remove it from this config, "
    "rotate it, and make sure the file is excluded from version control."
)
CREDENTIAL_ADVICE = (
    "Store this credential in a vault, inject it at runtime, and do not commit it."
)
SECRET_ADVICE = (
    "Do not store secrets in this file; use a secrets manager and rotate the "
    "value if it was ever exposed."
)
ENVIRONMENT_ADVICE = (
    "Reference a per-environment secret instead of a literal value; never commit it."
)
BOOLEAN_ADVICE = (
    "Store booleans unquoted and make sure the consuming loader parses booleans."
)
DRIFT_ADVICE = (
    "Keep this setting at its production default and document per-environment "
    "overrides to reduce configuration drift."
)
FORMAT_ADVICE = (
    "Fix formatting: add the missing '=', quote values with spaces, or correct "
    "the JSON syntax."
)


def recommend(finding: Finding) -> str:
    """Return remediation text for any finding the analyzers can produce."""

    severity = finding.severity
    if severity.is_structural:
        return FORMAT_ADVICE
    if severity in (Severity.CRITICAL, Severity.HIGH):
        if PRIVATE_KEY_PATTERN.search(finding.key):
            return PRIVATE_KEY_ADVICE
        if CREDENTIAL_KEY_PATTERN.search(finding.key):
            return CREDENTIAL_ADVICE
        return SECRET_ADVICE
    if severity is Severity.MEDIUM:
        return ENVIRONMENT_ADVICE
    if "boolean" in finding.message.lower():
        return BOOLEAN_ADVICE
    return DRIFT_ADVICE
