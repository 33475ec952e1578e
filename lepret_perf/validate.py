# lepret_perf/validate.py
from __future__ import annotations
import logging
import os, sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

from .config import load_ledger_dict
from .dates import parse_date
from .finance.cashflow import as_finite_float
from .schema import DEFAULT_CURRENCY, LEDGER_TOP_LEVEL_KEYS, TRANSACTION_SCHEMA, TRANSACTION_TYPES
from .types import Transaction

logger = logging.getLogger(__name__)


def _mode_from_env_or_flag(flag: str | None) -> str:
    if flag in ("strict", "relaxed"):
        return flag
    env = (os.environ.get("VALIDATION_MODE") or "").lower()
    return env if env in ("strict", "relaxed") else "relaxed"


def position_currency(data: Mapping[str, Any]) -> str:
    return str(data.get("currency") or DEFAULT_CURRENCY).strip().upper() or DEFAULT_CURRENCY


def _row_problems(i: int, row: Any, currency: str) -> List[str]:
    where = f"transactions[{i}]"
    if not isinstance(row, Mapping):
        return [f"{where}: expected a mapping, got {type(row).__name__}"]
    out: List[str] = []
    missing = [k for k, spec in TRANSACTION_SCHEMA.items() if spec.get("required") and row.get(k) is None]
    if missing:
        out.append(f"{where}: missing required keys: {missing}")
    unknown = [k for k in row.keys() if k not in TRANSACTION_SCHEMA]
    if unknown:
        out.append(f"{where}: unknown keys: {unknown}")
    if row.get("type") is not None and str(row["type"]).strip().lower() not in TRANSACTION_TYPES:
        out.append(f"{where}: unknown type {row['type']!r}")
    if row.get("amount") is not None:
        amt = as_finite_float(row["amount"])
        if amt is None:
            out.append(f"{where}: amount must be a finite number: {row['amount']!r}")
        elif amt < 0:
            out.append(f"{where}: amount must be >= 0 (sign comes from type): {amt}")
    if row.get("date") is not None and parse_date(row["date"]) is None:
        out.append(f"{where}: unparseable date {row['date']!r}")
    row_ccy = str(row.get("currency") or currency).strip().upper()
    if row_ccy != currency:
        out.append(f"{where}: currency {row_ccy} differs from position currency {currency}")
    return out


def validate_ledger_dict(data: Dict[str, Any], *, mode: str = "relaxed") -> None:
    """
    Guardrails for a flattened ledger document:
      - relaxed: require a `transactions` list; valuation values must be usable
      - strict : also reject unknown top-level keys and any malformed row
    Relaxed mode leaves row hygiene to the engine, which drops bad rows.
    """
    if "transactions" not in data:
        raise SystemExit("missing required keys: ['transactions']")
    txs = data["transactions"]
    if not isinstance(txs, list):
        raise SystemExit(f"transactions must be a list, got {type(txs).__name__}")

    # basic value checks (mode-agnostic)
    if data.get("ending_value") is not None and as_finite_float(data["ending_value"]) is None:
        raise SystemExit(f"ending_value must be a finite number: {data['ending_value']!r}")
    if data.get("as_of") is not None and parse_date(data["as_of"]) is None:
        raise SystemExit(f"as_of must be a date: {data['as_of']!r}")

    if mode == "strict":
        unknown = [k for k in data.keys() if k not in LEDGER_TOP_LEVEL_KEYS]
        if unknown:
            raise SystemExit(f"unknown top-level keys (strict mode): {unknown}")
        currency = position_currency(data)
        problems: List[str] = []
        for i, row in enumerate(txs):
            problems.extend(_row_problems(i, row, currency))
        if problems:
            raise SystemExit("invalid transactions (strict mode): " + "; ".join(problems))


def normalize_transactions(rows: Iterable[Any], *, currency: str = DEFAULT_CURRENCY) -> List[Transaction]:
    """
    Build Transaction records scoped to one currency. Rows in another currency
    are dropped with a warning: the engine does no conversion or netting.
    """
    ccy = (currency or DEFAULT_CURRENCY).strip().upper()
    out: List[Transaction] = []
    skipped = 0
    for row in rows or []:
        if not isinstance(row, Mapping):
            skipped += 1
            continue
        tx = Transaction.from_mapping({**row, "currency": row.get("currency") or ccy})
        if tx.currency != ccy:
            logger.warning("skipping %s row %s: position currency is %s", tx.currency, tx.id or "?", ccy)
            continue
        out.append(tx)
    if skipped:
        logger.warning("skipped %d non-mapping ledger rows", skipped)
    return out


def load_ledger_file(path: Path) -> Dict[str, Any]:
    p = Path(path)
    if p.is_dir():
        # the runner handles directories; keep this function file-only
        raise SystemExit(f"{p} is a directory (expected a file)")
    return load_ledger_dict(p)


def _iter_input_files(p: Path) -> Iterable[Path]:
    if p.is_file():
        yield p
    elif p.is_dir():
        for ext in ("*.yaml", "*.yml", "*.json"):
            yield from sorted(p.rglob(ext))


def _main(argv: List[str] | None = None) -> int:
    import argparse
    parser = argparse.ArgumentParser(prog="lepret_perf.validate", add_help=True)
    parser.add_argument("paths", nargs="+", help="ledger files (YAML/JSON) or directories of ledgers")
    parser.add_argument("--mode", choices=["strict", "relaxed"], default=None, help="validation mode")
    args = parser.parse_args(argv)

    mode = _mode_from_env_or_flag(args.mode)
    had_error = False

    for raw in args.paths:
        target = Path(raw)
        any_seen = False
        for f in _iter_input_files(target):
            if not f.is_file():
                continue
            any_seen = True
            try:
                data = load_ledger_file(f)
                validate_ledger_dict(data, mode=mode)
                print(f"OK: {f} ({len(data['transactions'])} transactions, {position_currency(data)})")
            except SystemExit as e:
                print(f"{f}: {e}", file=sys.stderr)
                had_error = True
            except (OSError, ValueError) as e:
                print(f"{f}: ERROR: {e}", file=sys.stderr)
                had_error = True
        if not any_seen:
            print(f"{target}: no YAML/JSON files found", file=sys.stderr)
            had_error = True

    return 1 if had_error else 0

if __name__ == "__main__":
    raise SystemExit(_main())
