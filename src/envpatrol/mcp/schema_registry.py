"""Load the JSON schemas that define the PUBLIC request/response contract."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from jsonschema import Draft7Validator, ValidationError

PROJECT_ROOT = Path(__file__).resolve().parents[3]
SCHEMA_DIR = PROJECT_ROOT / "schemas"
EXAMPLE_DIR = SCHEMA_DIR / "examples"

SchemaValidationError = ValidationError
"""Re-exported so resources do not import jsonschema directly."""

SCHEMA_FILES = {
    "config_scan_input_v0.1": "config_scan_input_schema_v0.1.json",
    "config_scan_response_v0.1": "config_scan_response_schema_v0.1.json",
    "config_normalize_input_v0.1": "config_normalize_input_schema_v0.1.json",
    "config_normalize_response_v0.1": (
        "config_normalize_response_schema_v0.1.json"
    ),
    "config_report_input_v0.1": "config_report_input_schema_v0.1.json",
    "config_report_response_v0.1": "config_report_response_schema_v0.1.json",
    "config_scans_list_response_v0.1": (
        "config_scans_list_response_schema_v0.1.json"
    ),
    "config_scan_get_response_v0.1": "config_scan_get_response_schema_v0.1.json",
}

EXAMPLE_FILES = {
    "config_scan_input_example_min": "config_scan_input_example_min.json",
    "config_scan_response_example_min": "config_scan_response_example_min.json",
    "config_normalize_input_example_min": (
        "config_normalize_input_example_min.json"
    ),
    "config_normalize_response_example_min": (
        "config_normalize_response_example_min.json"
    ),
    "config_report_input_example_min": "config_report_input_example_min.json",
    "config_report_response_example_min": (
        "config_report_response_example_min.json"
    ),
    "config_scans_list_response_example_min": (
        "config_scans_list_response_example_min.json"
    ),
    "config_scan_get_response_example_min": (
        "config_scan_get_response_example_min.json"
    ),
}

EXAMPLE_SCHEMAS = {
    "config_scan_input_example_min": "config_scan_input_v0.1",
    "config_scan_response_example_min": "config_scan_response_v0.1",
    "config_normalize_input_example_min": "config_normalize_input_v0.1",
    "config_normalize_response_example_min": "config_normalize_response_v0.1",
    "config_report_input_example_min": "config_report_input_v0.1",
    "config_report_response_example_min": "config_report_response_v0.1",
    "config_scans_list_response_example_min": "config_scans_list_response_v0.1",
    "config_scan_get_response_example_min": "config_scan_get_response_v0.1",
}
"""Which schema each shipped example is expected to satisfy."""

_SCHEMAS: dict[str, Mapping[str, Any]] = {}
_EXAMPLES: dict[str, Mapping[str, Any]] = {}


def _load_json_file(path: Path) -> Mapping[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def get_schema(name: str) -> Mapping[str, Any]:
    """Return the JSON schema registered under ``name`` (cached)."""

    if name not in _SCHEMAS:
        _SCHEMAS[name] = _load_json_file(SCHEMA_DIR / SCHEMA_FILES[name])
    return _SCHEMAS[name]


def get_example(name: str) -> Mapping[str, Any]:
    """Return a shipped example payload by name (cached)."""

    if name not in _EXAMPLES:
        _EXAMPLES[name] = _load_json_file(EXAMPLE_DIR / EXAMPLE_FILES[name])
    return _EXAMPLES[name]


def validate(name: str, instance: Any) -> None:
    """Raise ``SchemaValidationError`` when ``instance`` violates schema ``name``."""

    Draft7Validator(get_schema(name)).validate(instance)
