# lepret_perf/cli.py
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

# Only imports the thin runner; the solvers stay behind it
from .runner import FORMATS, MODES, run_dir


def parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="lepret_perf",
        description="Investor performance engine: IRR and time-weighted return per position ledger",
    )
    p.add_argument(
        "--mode",
        default="report",
        choices=list(MODES),
        help="Which figures to report (default: report = IRR, TWR and capital totals).",
    )
    p.add_argument(
        "--config",
        required=True,
        help="Path to a single ledger (YAML/JSON), or a directory of ledgers for a portfolio report.",
    )
    p.add_argument(
        "--outputs-dir",
        default="outputs",
        help="Where summary.json, the portfolio file and traces go (default: outputs; created if missing).",
    )
    p.add_argument(
        "--format",
        dest="fmt",
        default="csv",
        choices=list(FORMATS),
        help="Output format for portfolio/trace files (default: csv).",
    )
    p.add_argument(
        "--save-steps",
        action="store_true",
        help="If set, write the IRR cashflows and TWR NAV steps per position.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log dropped rows and solver bail-outs.")
    v = p.add_mutually_exclusive_group()
    v.add_argument(
        "--strict",
        action="store_true",
        help="Enable strict validation (malformed rows and unknown keys raise).",
    )
    v.add_argument(
        "--relaxed",
        action="store_true",
        help="Enable relaxed validation (malformed rows are dropped by the engine).",
    )
    return p.parse_args(argv)


def _apply_validation_mode(ns: argparse.Namespace) -> None:
    # Flags win over VALIDATION_MODE; without a flag the environment decides.
    if ns.strict:
        os.environ["VALIDATION_MODE"] = "strict"
    elif ns.relaxed:
        os.environ["VALIDATION_MODE"] = "relaxed"


def main(argv: list[str] | None = None) -> int:
    try:
        ns = parse_args(argv)
    except SystemExit as e:
        return int(e.code) if isinstance(e.code, int) else 2
    _apply_validation_mode(ns)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    outputs_dir = Path(ns.outputs_dir).resolve()
    cfg_path = Path(ns.config).resolve()
    if not cfg_path.exists():
        print(f"ERROR: {cfg_path} does not exist", file=sys.stderr)
        return 2

    try:
        res = run_dir(cfg_path, outputs_dir, mode=ns.mode, fmt=ns.fmt, save_steps=ns.save_steps)
    except SystemExit as e:
        # Validation failures carry a message, not a code
        if isinstance(e.code, int):
            return e.code
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except (OSError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(json.dumps(res.summary, indent=2, default=str))
    return 0


__all__ = ["main", "parse_args"]
