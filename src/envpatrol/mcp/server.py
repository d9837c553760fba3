"""Minimal FastMCP-style server entrypoint for EnvPatrol."""

from __future__ import annotations

import logging
import sys
from typing import Any, Callable, Mapping

from ..services import scan_history_store
from ..services.config_scan import (
    PayloadTooLargeError,
    normalize_config_public,
    report_config_public,
    scan_config_public,
)
from ..services.normalizer import NormalizerConfig
from ..services.sanitizer import sanitize_public_response
from . import reason_codes, schema_registry
from .schema_registry import SchemaValidationError

_LOG = logging.getLogger(__name__)

SCAN_INPUT_SCHEMA = "config_scan_input_v0.1"
SCAN_RESPONSE_SCHEMA = "config_scan_response_v0.1"
NORMALIZE_INPUT_SCHEMA = "config_normalize_input_v0.1"
NORMALIZE_RESPONSE_SCHEMA = "config_normalize_response_v0.1"
REPORT_INPUT_SCHEMA = "config_report_input_v0.1"
REPORT_RESPONSE_SCHEMA = "config_report_response_v0.1"
LIST_RESPONSE_SCHEMA = "config_scans_list_response_v0.1"
GET_RESPONSE_SCHEMA = "config_scan_get_response_v0.1"


def _sanitized_error(reason: str, detail: str) -> dict[str, str]:
    """Return a sanitized error payload with a stable reason code."""

    payload = {"status": "error", "reason": reason, "detail": detail}
    return sanitize_public_response(payload)


def _status(detail: str) -> Mapping[str, str]:
    return sanitize_public_response({"status": "ok", "detail": detail})


def _checked_response(
    schema_name: str, response: Mapping[str, Any], detail: str
) -> Mapping[str, Any]:
    try:
        schema_registry.validate(schema_name, response)
    except SchemaValidationError as exc:
        _LOG.error("Response violated %s: %s", schema_name, exc.message)
        return _sanitized_error(reason_codes.RESPONSE_VALIDATION_FAILED, detail)
    return response


def _run_content_operation(
    request: Mapping[str, Any],
    input_schema: str,
    operation: Callable[[Mapping[str, Any]], Mapping[str, Any]],
) -> Mapping[str, Any]:
    """Validate ``request`` and run ``operation``; errors come back sanitized."""

    try:
        schema_registry.validate(input_schema, request)
    except SchemaValidationError:
        return _sanitized_error(
            reason_codes.INVALID_INPUT, "Request failed validation."
        )

    try:
        return operation(request)
    except PayloadTooLargeError:
        return _sanitized_error(
            reason_codes.PAYLOAD_TOO_LARGE,
            "Payload exceeds the allowed size.",
        )
    except ValueError:
        return _sanitized_error(
            reason_codes.INVALID_INPUT,
            "Unable to process the configuration payload.",
        )


class HealthResource:
    """Simple wellbeing resource returning sanitized payloads."""

    __slots__ = ()

    def get_status(self) -> Mapping[str, str]:
        """Return a public-safe status digest."""

        return _status("EnvPatrol MCP server ready")

    def __call__(self) -> Mapping[str, str]:
        return self.get_status()


class ConfigScanResource:
    """PUBLIC entrypoint that scores a dotenv or JSON payload."""

    __slots__ = ()

    def __call__(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        return self.scan(request)

    def get_status(self) -> Mapping[str, str]:
        return _status("PUBLIC config scan resource ready")

    def scan(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        response = _run_content_operation(
            request,
            SCAN_INPUT_SCHEMA,
            lambda req: scan_config_public(
                req["content"], persist_record=req.get("persist", True)
            ),
        )
        if response.get("status") == "error":
            return response
        return _checked_response(
            SCAN_RESPONSE_SCHEMA,
            response,
            "Service output did not meet the public contract.",
        )


class ConfigNormalizeResource:
    """PUBLIC entrypoint returning the canonical rewrite of a payload."""

    __slots__ = ()

    def __call__(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        return self.normalize(request)

    def get_status(self) -> Mapping[str, str]:
        return _status("PUBLIC config normalize resource ready")

    def normalize(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        response = _run_content_operation(
            request,
            NORMALIZE_INPUT_SCHEMA,
            lambda req: normalize_config_public(
                req["content"], self._config(req)
            ),
        )
        if response.get("status") == "error":
            return response
        return _checked_response(
            NORMALIZE_RESPONSE_SCHEMA,
            response,
            "Normalize response violated the public contract.",
        )

    @staticmethod
    def _config(request: Mapping[str, Any]) -> NormalizerConfig:
        defaults = NormalizerConfig.from_env()
        return NormalizerConfig(
            duplicates=request.get("duplicates", defaults.duplicates),
            missing_equals=request.get("missing_equals", defaults.missing_equals),
        )


class ConfigReportResource:
    """PUBLIC entrypoint rendering the plain-text scan report."""

    __slots__ = ()

    def __call__(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        return self.report(request)

    def get_status(self) -> Mapping[str, str]:
        return _status("PUBLIC config report resource ready")

    def report(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        response = _run_content_operation(
            request,
            REPORT_INPUT_SCHEMA,
            lambda req: report_config_public(
                req["content"], include_content=req.get("include_content", True)
            ),
        )
        if response.get("status") == "error":
            return response
        return _checked_response(
            REPORT_RESPONSE_SCHEMA,
            response,
            "Report response violated the public contract.",
        )


class ConfigScansListResource:
    """PUBLIC resource that lists stored scan snapshots, newest first."""

    __slots__ = ()

    def __call__(self, request: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
        limit = self._normalize_limit(request)
        scans = scan_history_store.list_scans(limit=limit)
        response = {
            "operation": "config_scans_list",
            "count": len(scans),
            "max_records": scan_history_store.MAX_STORED_RECORDS,
            "scans": scans,
        }
        return _checked_response(
            LIST_RESPONSE_SCHEMA,
            response,
            "List response violated the public contract.",
        )

    def get_status(self) -> Mapping[str, str]:
        return _status("PUBLIC scan history resource ready")

    @staticmethod
    def _normalize_limit(request: Mapping[str, Any] | None) -> int | None:
        if not request:
            return None
        limit = request.get("limit")
        if limit is None or isinstance(limit, bool):
            return None
        try:
            return int(limit)
        except (TypeError, ValueError):
            return None


class ConfigScanGetResource:
    """PUBLIC resource returning a single stored scan snapshot."""

    __slots__ = ()

    def __call__(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        scan_id = request.get("scan_id")
        if not scan_id or not isinstance(scan_id, str):
            return _sanitized_error(
                reason_codes.INVALID_INPUT,
                "A scan_id is required for PUBLIC retrieval.",
            )

        record = scan_history_store.get_scan(scan_id)
        if record is None:
            return _sanitized_error(
                reason_codes.RECORD_NOT_FOUND,
                "The requested scan record could not be located.",
            )

        return _checked_response(
            GET_RESPONSE_SCHEMA,
            {"operation": "config_scan_get", "scan": record},
            "Get response violated the public contract.",
        )

    def get_status(self) -> Mapping[str, str]:
        return _status("PUBLIC scan lookup resource ready")


RESOURCE_REGISTRY = {
    "health": HealthResource(),
    "public://config/scan": ConfigScanResource(),
    "public://config/normalize": ConfigNormalizeResource(),
    "public://config/report": ConfigReportResource(),
    "public://config/scans": ConfigScansListResource(),
    "public://config/scan/{scan_id}": ConfigScanGetResource(),
}
"""Resource registry for FastMCP tooling."""


def create_server() -> Mapping[str, Mapping[str, Any]]:
    """Return the configured resources for this server."""

    return {"resources": RESOURCE_REGISTRY}


def main() -> None:
    """Log available resources without launching networking."""

    sys.stdout.write("EnvPatrol MCP server initialized with resources:\n\n")
    for name, resource in RESOURCE_REGISTRY.items():
        sys.stdout.write(f"- {name}: {resource.get_status()}\n")


if __name__ == "__main__":
    main()
