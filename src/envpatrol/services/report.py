"""Plain-text scan report with remediation guidance."""

from __future__ import annotations

from ..domain.models import ScanResult
from .recommendations import recommend
from .sanitizer import public_finding_key, redact_config_text

REPORT_TITLE = "EnvPatrol Scan Report"
CONTENT_HEADER = "--- Original Content (values redacted) ---"


def build_report_text(
    content: str, result: ScanResult, include_content: bool = True
) -> str:
    lines = [
        REPORT_TITLE,
        f"Format: {result.format.upper()}",
        f"Security Score: {result.score}/100",
    ]
    if result.aborted is not None:
        lines.append(f"Aborted: {result.aborted.value}")
    lines.extend(["", "Findings:"])
    if not result.findings:
        lines.append("  None")
    for finding in result.findings:
        location = f" (line {finding.line})" if finding.line is not None else ""
        key = public_finding_key(finding)
        lines.append(
            f"  - [{finding.severity.value.upper()}] {key}{location}"
            f" :: {finding.message}"
        )
        lines.append(f"    Fix: {recommend(finding)}")
    if include_content:
        lines.extend(["", CONTENT_HEADER, redact_config_text(content)])
    return "\n".join(lines)
