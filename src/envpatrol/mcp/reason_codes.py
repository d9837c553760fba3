"""Reason codes carried by sanitized PUBLIC error payloads."""

from __future__ import annotations

PAYLOAD_TOO_LARGE = "payload_too_large"
"""Content rejected because it exceeded the configured byte budget."""

INVALID_INPUT = "invalid_input"
"""Request failed schema validation or carried unusable options."""

RESPONSE_VALIDATION_FAILED = "response_validation_failed"
"""A scan produced output that violated the public response schema."""

RECORD_NOT_FOUND = "record_not_found"
"""No stored scan snapshot matches the requested scan_id."""
