"""PUBLIC-safe scan, normalize and report operations."""

from __future__ import annotations

import uuid

from ..domain.models import ScanAbortReason, ScanResult
from .budget_audit import record_budget_event
from .normalizer import NormalizerConfig, normalize
from .recommendations import recommend
from .report import build_report_text
from .sanitizer import public_finding_key, redact_config_text
from .scan_history_store import persist_scan_record
from .scan_limits import DEFAULT_SCAN_LIMITS, ScanLimitConfig
from .scanner import scan

MAX_PAYLOAD_BYTES = DEFAULT_SCAN_LIMITS.max_input_bytes
"""Default maximum allowed payload size in bytes for PUBLIC operations."""

SAMPLE_CHARS = 200
"""Length of the redacted content sample stored with each history record."""


class PayloadTooLargeError(ValueError):
    """Raised when an incoming payload exceeds the sanctioned size."""


def _check_payload(content: str, operation: str) -> ScanLimitConfig:
    limits = ScanLimitConfig.from_env()
    byte_count = len(content.encode("utf-8"))
    if byte_count > limits.max_input_bytes:
        record_budget_event(
            reason=ScanAbortReason.MAX_INPUT_BYTES.value,
            operation=operation,
            limits=limits.as_mapping(),
            observed=byte_count,
        )
        raise PayloadTooLargeError("Payload exceeds maximum allowed size.")
    return limits


def _public_findings(result: ScanResult) -> list[dict[str, object]]:
    findings = []
    for finding in result.findings:
        mapping = finding.to_mapping()
        mapping["key"] = public_finding_key(finding)
        mapping["recommendation"] = recommend(finding)
        findings.append(mapping)
    return findings


def scan_config_public(
    content: str, persist_record: bool = True
) -> dict[str, object]:
    """
    Scan a configuration payload and build a schema-compliant response.

    Args:
        content: Raw dotenv or JSON text (bounded by MAX_PAYLOAD_BYTES).
        persist_record: Store a redacted snapshot in the scan history.

    Returns:
        A dictionary ready for PUBLIC consumption.
    """

    limits = _check_payload(content, "scan")
    result = scan(content, limits)
    findings = _public_findings(result)
    scan_id = uuid.uuid4().hex
    if persist_record:
        persist_scan_record(
            scan_id=scan_id,
            format=result.format,
            score=result.score,
            findings=findings,
            sample=redact_config_text(content)[:SAMPLE_CHARS],
        )

    response: dict[str, object] = {
        "operation": "config_scan",
        "scan_id": scan_id,
        "format": result.format,
        "score": result.score,
        "findings": findings,
        "findings_count": len(findings),
        "persisted": persist_record,
    }
    if result.aborted is not None:
        response["aborted"] = result.aborted.value
    return response


def _summary(result: ScanResult) -> dict[str, object]:
    return {
        "format": result.format,
        "score": result.score,
        "structural_findings": result.structural_count,
    }


def normalize_config_public(
    content: str, config: NormalizerConfig | None = None
) -> dict[str, object]:
    """Normalize a payload and report how the re-scan compares."""

    limits = _check_payload(content, "normalize")
    fixed = normalize(content, config, limits)
    return {
        "operation": "config_normalize",
        "fixed": fixed,
        "changed": fixed != content,
        "before": _summary(scan(content, limits)),
        "after": _summary(scan(fixed, limits)),
    }


def report_config_public(
    content: str, include_content: bool = True
) -> dict[str, object]:
    """Render the plain-text report for a payload."""

    limits = _check_payload(content, "report")
    result = scan(content, limits)
    return {
        "operation": "config_report",
        "report": build_report_text(content, result, include_content),
    }
