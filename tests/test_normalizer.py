"""Canonical rewrites, policies and the re-scan guarantees of ``normalize``."""

from __future__ import annotations

import pytest

from envpatrol.services.budget_audit import get_budget_events
from envpatrol.services.normalizer import NormalizerConfig, normalize, quote_value
from envpatrol.services.scan_limits import ScanLimitConfig
from envpatrol.services.scanner import scan

MESSY_INPUTS = [
    "  PORT = 8080\nNAME=hello world\nPORT=9090\n",
    "export API_TOKEN='abc def' # rotate me\n",
    '// comment\n-----\nTODO: tidy\nFLAG="true"\n\n\n\nMSG=a\\nb\n',
    "MY KEY=value with spaces\nJUST TEXT\nA=x#y\n",
    "A=1\r\nB=2\r\n",
    "{ name = demo, port: 8080, 'label': 'a b' }",
    '{"b": 1, "a": {"c": true}}',
    "{ nested: {a: 1} }   \n\n",
    "{\"ratio\": NaN}",
    "SAY=say \"hi\" now\nODD=it's \"odd\" here\n",
]


def test_dotenv_cleanup_keeps_first_duplicate() -> None:
    text = "  PORT = 8080\nNAME=hello world\nPORT=9090\n"

    assert normalize(text) == 'PORT=8080\nNAME="hello world"\n'


def test_keep_last_duplicate_policy() -> None:
    text = "  PORT = 8080\nNAME=hello world\nPORT=9090\n"
    config = NormalizerConfig(duplicates="last")

    assert normalize(text, config) == 'NAME="hello world"\nPORT=9090\n'


def test_missing_equals_policies() -> None:
    text = "JUST TEXT\nA=1\n"

    assert normalize(text) == "A=1\n"
    annotated = normalize(text, NormalizerConfig(missing_equals="annotate"))
    assert annotated == "# FIXME: JUST TEXT\nA=1\n"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ('FLAG="true"', "FLAG=true\n"),
        ("// note\nA=1", "# note\nA=1\n"),
        ("MY-KEY=1", "MY_KEY=1\n"),
        ("export A=1", "A=1\n"),
        ("A=1\n\n\n\nB=2\n\n", "A=1\n\nB=2\n"),
        ("PORT=8080 # the port", "PORT=8080 # the port\n"),
        ("MSG=a\\nb", 'MSG="a\\nb"\n'),
        ("A=x#y", 'A="x#y"\n'),
        ("-----\nA=1\nNOTE keep\n", "A=1\n"),
        ("# kept comment\nA=1", "# kept comment\nA=1\n"),
    ],
)
def test_dotenv_rewrites(text: str, expected: str) -> None:
    assert normalize(text) == expected


def test_valid_json_is_pretty_printed_in_order() -> None:
    assert normalize('{"b":1,"a":{"c":true}}') == (
        '{\n  "b": 1,\n  "a": {\n    "c": true\n  }\n}\n'
    )


def test_near_json_is_rewritten() -> None:
    assert normalize("{ name = demo, port: 8080 }") == (
        '{\n  "name": "demo",\n  "port": 8080\n}\n'
    )


def test_unsupported_json_only_gets_whitespace_cleanup() -> None:
    assert normalize("{ nested: {a: 1} }   \n\n\n") == "{ nested: {a: 1} }\n"


def test_blank_input_normalizes_to_empty() -> None:
    assert normalize("") == ""
    assert normalize(" \n\t\n") == ""


def test_over_budget_input_is_returned_unchanged() -> None:
    text = "A=1\nB=2\nC=3"
    limits = ScanLimitConfig(1_000, 2, 100, 8)

    assert normalize(text, limits=limits) == text
    (event,) = get_budget_events()
    assert event["operation"] == "normalize"
    assert event["abort_reason"] == "MAX_LINES"


@pytest.mark.parametrize("text", MESSY_INPUTS)
def test_normalize_is_idempotent(text: str) -> None:
    once = normalize(text)

    assert normalize(once) == once


@pytest.mark.parametrize("text", MESSY_INPUTS)
def test_structural_findings_never_increase(text: str) -> None:
    before = scan(text).structural_count
    after = scan(normalize(text)).structural_count

    assert after <= before


def test_normalized_dotenv_has_no_structural_findings() -> None:
    fixed = normalize(MESSY_INPUTS[0] + MESSY_INPUTS[3])

    assert scan(fixed).structural_count == 0


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("hello world", '"hello world"'),
        ('say "hi"', "'say \"hi\"'"),
        ("ends with \\", "'ends with \\'"),
        ("it's \"odd\"", '"it\'s \\"odd\\""'),
    ],
)
def test_quote_value_choices(value: str, expected: str) -> None:
    assert quote_value(value) == expected


def test_config_rejects_unknown_policies() -> None:
    with pytest.raises(ValueError):
        NormalizerConfig(duplicates="newest")
    with pytest.raises(ValueError):
        NormalizerConfig(missing_equals="keep")


def test_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVPATROL_NORMALIZE_DUPLICATES", " LAST ")
    monkeypatch.setenv("ENVPATROL_NORMALIZE_MISSING_EQUALS", "bogus")

    config = NormalizerConfig.from_env()

    assert config.duplicates == "last"
    assert config.missing_equals == "drop"
