# lepret_perf/runner.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, List, Optional
from datetime import datetime
import logging
import json, csv

from .adapters import position_trace, run_position
from .validate import _mode_from_env_or_flag, load_ledger_file, validate_ledger_dict

logger = logging.getLogger(__name__)

MODES = ("irr", "twr", "report")
FORMATS = ("csv", "jsonl")

# Columns kept per mode; "report" keeps everything.
_MODE_COLUMNS: Dict[str, tuple] = {
    "irr": ("position_id", "name", "currency", "current_value", "as_of", "irr", "irr_converged",
            "transactions_used", "transactions_total", "error"),
    "twr": ("position_id", "name", "currency", "current_value", "time_weighted_return",
            "transactions_total", "error"),
}


@dataclass
class RunResult:
    summary: Dict[str, Any]
    summary_path: Path
    results_path: Optional[Path] = None
    steps_paths: Optional[List[Path]] = None


def _project(row: Dict[str, Any], mode: str) -> Dict[str, Any]:
    cols = _MODE_COLUMNS.get(mode)
    if cols is None:
        return row
    return {k: row.get(k) for k in cols}


def _write_jsonl(path: Path, rows: List[Dict[str, Any]]) -> None:
    with path.open("w", encoding="utf-8") as f:
        for row in rows:
            f.write(json.dumps(row, default=str) + "\n")


def _write_csv(path: Path, rows: List[Dict[str, Any]]) -> None:
    if not rows:
        path.write_text("", encoding="utf-8")
        return
    hdr: List[str] = []
    for r in rows:
        for k in r.keys():
            if k not in hdr:
                hdr.append(k)
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=hdr)
        w.writeheader()
        for r in rows:
            w.writerow({k: ("" if r.get(k) is None else r.get(k)) for k in hdr})


def _write_rows(path_base: Path, rows: List[Dict[str, Any]], fmt: str) -> Path:
    path = path_base.parent / f"{path_base.name}.{fmt}"
    if fmt == "jsonl":
        _write_jsonl(path, rows)
    elif fmt == "csv":
        _write_csv(path, rows)
    else:
        raise SystemExit(f"unknown fmt: {fmt}")
    return path


def evaluate_ledger(path: Path, *, mode: str = "report", validation: str = "relaxed") -> Dict[str, Any]:
    """Load, validate and evaluate one ledger file into a flat summary row."""
    data = load_ledger_file(path)
    validate_ledger_dict(data, mode=validation)
    row = run_position(data).as_row()
    row.setdefault("source", str(path))
    if not row.get("position_id"):
        row["position_id"] = path.stem
    return _project(row, mode)


def _failed_row(path: Path, err: Any) -> Dict[str, Any]:
    return {"position_id": path.stem, "source": str(path), "error": str(err)}


def run_dir(
    config: str | Path,
    out_dir: str | Path,
    *,
    mode: str = "report",
    fmt: str = "jsonl",
    save_steps: bool = False,
    validation: str | None = None,
) -> RunResult:
    """
    Evaluate a single ledger file or every ledger in a directory.

    File mode writes summary.json (and raises on validation errors).
    Directory mode writes portfolio.<fmt> with one row per position; a ledger
    that fails to load or validate becomes an `error` row instead of
    aborting the portfolio.
    """
    if mode not in MODES:
        raise SystemExit(f"unknown mode: {mode}")
    if fmt not in FORMATS:
        raise SystemExit(f"unknown fmt: {fmt}")
    vmode = _mode_from_env_or_flag(validation)

    cfg_path = Path(config)
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if cfg_path.is_dir():
        files = [f for ext in ("*.yaml", "*.yml", "*.json") for f in sorted(cfg_path.glob(ext)) if f.is_file()]
        if not files:
            raise SystemExit(f"{cfg_path}: no ledger files found")

        rows: List[Dict[str, Any]] = []
        steps_paths: List[Path] = []
        for f in files:
            try:
                row = evaluate_ledger(f, mode=mode, validation=vmode)
            except SystemExit as e:
                logger.warning("ledger %s rejected: %s", f, e)
                rows.append(_failed_row(f, e))
                continue
            except Exception as e:
                # anything else from a single ledger is reported on its row
                logger.warning("ledger %s failed: %s: %s", f, type(e).__name__, e)
                rows.append(_failed_row(f, e))
                continue
            rows.append(row)
            if save_steps:
                steps_paths.extend(_save_steps(f, out, fmt, stamp, as_of=row.get("as_of")))

        results_path = _write_rows(out / "portfolio", rows, fmt)
        summary = {
            "mode": mode,
            "positions": len(rows),
            "failed": sum(1 for r in rows if r.get("error")),
            "results": str(results_path),
        }
        summary_path = out / "summary.json"
        summary_path.write_text(json.dumps(summary, indent=2), encoding="utf-8")
        logger.info("evaluated %d ledgers (%d failed)", summary["positions"], summary["failed"])
        return RunResult(summary=summary, summary_path=summary_path, results_path=results_path,
                         steps_paths=steps_paths or None)

    # Single file path
    summary = evaluate_ledger(cfg_path, mode=mode, validation=vmode)
    summary_path = out / "summary.json"
    summary_path.write_text(json.dumps(summary, indent=2, default=str), encoding="utf-8")

    steps_paths = _save_steps(cfg_path, out, fmt, stamp, as_of=summary.get("as_of")) if save_steps else None
    return RunResult(summary=summary, summary_path=summary_path, steps_paths=steps_paths)


def _save_steps(cfg_path: Path, out: Path, fmt: str, stamp: str, *, as_of: Optional[str]) -> List[Path]:
    trace = position_trace(load_ledger_file(cfg_path), as_of=as_of)
    return [
        _write_rows(out / f"{cfg_path.stem}_cashflows_{stamp}", trace["cashflows"], fmt),
        _write_rows(out / f"{cfg_path.stem}_twr_steps_{stamp}", trace["twr_steps"], fmt),
    ]

