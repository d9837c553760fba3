"""Entry point that classifies a configuration payload and scores it.

``scan`` never raises: malformed input surfaces as findings, and inputs that
exceed the complexity budget come back as an aborted result.
"""

from __future__ import annotations

import logging

from ..domain.models import Finding, ScanResult, Severity
from .budget_audit import record_budget_event
from .dotenv_analyzer import DOTENV_FORMAT, analyze_dotenv
from .format_detector import detect_format, is_blank, strip_bom
from .json_analyzer import JSON_FORMAT, ROOT_PATH, analyze_json
from .scan_limits import ScanBudgetExceeded, ScanLimitConfig
from .scoring import MIN_SCORE

_LOG = logging.getLogger(__name__)

ABORTED_MESSAGE = "scan aborted: input too complex"

EMPTY_RESULT = ScanResult(score=100, findings=(), format=DOTENV_FORMAT)


def scan(text: str, limits: ScanLimitConfig | None = None) -> ScanResult:
    """Detect the format of ``text`` and run the matching analyzer."""

    if is_blank(text):
        return EMPTY_RESULT

    limits = limits or ScanLimitConfig.from_env()
    payload = strip_bom(text)
    report_format = detect_format(payload)
    _LOG.debug("Scanning %d characters as %s", len(payload), report_format)
    try:
        limits.check_size(payload)
        if report_format == JSON_FORMAT:
            return analyze_json(payload, limits)
        return analyze_dotenv(payload, limits)
    except ScanBudgetExceeded as exc:
        return _aborted_result(exc, report_format, limits)


def _aborted_result(
    exc: ScanBudgetExceeded, report_format: str, limits: ScanLimitConfig
) -> ScanResult:
    """Unscanned content is not presented as safe, so the score drops to zero."""

    _LOG.warning("Scan aborted: %s", exc)
    record_budget_event(
        reason=exc.reason.value,
        operation="scan",
        limits=limits.as_mapping(),
        observed=exc.observed,
    )
    finding = Finding(
        key=ROOT_PATH,
        severity=Severity.ERROR_FORMAT,
        message=ABORTED_MESSAGE,
        penalty=100,
        path=ROOT_PATH,
    )
    return ScanResult(
        score=MIN_SCORE,
        findings=(finding,),
        format=report_format,
        aborted=exc.reason,
    )
