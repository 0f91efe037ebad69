from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from clinic_cds.annotation.pipeline import annotate_text
from clinic_cds.evidence.table import default_evidence_table, load_evidence_table
from clinic_cds.internal_core.config import load_config


def _read_text(text_file: str | None) -> str:
    if not text_file:
        return sys.stdin.read()
    path = Path(text_file).expanduser()
    if not path.exists():
        raise SystemExit(f"note file not found: {path}")
    return path.read_text(encoding="utf-8")


def _risk_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.egfr is not None:
        overrides["egfr"] = args.egfr
    if args.sbp is not None:
        overrides["sbp"] = args.sbp
    if args.score2:
        overrides["score2_risk_category"] = args.score2
    return overrides


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Annotate a clinic note with patient state, ESC risk category and NHI eligibility."
    )
    parser.add_argument(
        "--text-file",
        default=None,
        help="Path to a UTF-8 note file (default: read stdin).",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Indent the JSON output.",
    )
    parser.add_argument(
        "--no-trace",
        action="store_true",
        help="Omit the extraction trace from the output.",
    )
    parser.add_argument("--egfr", type=float, default=None, help="eGFR (mL/min/1.73m2), not read from text.")
    parser.add_argument("--sbp", type=float, default=None, help="Systolic blood pressure (mmHg), not read from text.")
    parser.add_argument(
        "--score2",
        choices=["very_high", "high", "moderate", "low"],
        default=None,
        help="Caller-provided SCORE2 risk category.",
    )
    args = parser.parse_args(argv)

    config = load_config()
    evidence = (
        default_evidence_table()
        if config.uses_packaged_evidence()
        else load_evidence_table(config.evidence_path())
    )
    annotation = annotate_text(
        _read_text(args.text_file),
        evidence=evidence,
        include_trace=not args.no_trace,
        risk_overrides=_risk_overrides(args),
    )
    print(json.dumps(annotation.to_dict(), ensure_ascii=False, indent=2 if args.pretty else None))


if __name__ == "__main__":
    main()
