"""LOCAL-only CLI to dry-run a configuration scan without persistence."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT.parent / "src"))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Score a dotenv or JSON file locally without storing it.",
    )
    parser.add_argument(
        "config_path",
        type=Path,
        help="Path to the configuration file to evaluate locally.",
    )
    parser.add_argument(
        "--normalize",
        action="store_true",
        help="Also report how the normalized rewrite would score.",
    )
    return parser.parse_args(argv)


def load_payload(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    payload = load_payload(args.config_path)

    from envpatrol.services.config_scan import (
        PayloadTooLargeError,
        normalize_config_public,
        scan_config_public,
    )

    try:
        response = scan_config_public(payload, persist_record=False)
    except PayloadTooLargeError as exc:
        sys.stderr.write(f"{exc}\n")
        return 2

    summary: dict[str, object] = {
        "format": response["format"],
        "score": response["score"],
        "findings_count": response["findings_count"],
        "severities": sorted(
            {finding["severity"] for finding in response["findings"]}
        ),
    }
    if "aborted" in response:
        summary["aborted"] = response["aborted"]
    if args.normalize:
        normalized = normalize_config_public(payload)
        summary["normalized"] = {
            "changed": normalized["changed"],
            "after": normalized["after"],
        }

    sys.stdout.write(json.dumps(summary, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
