# lepret_perf/adapters.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .core import build_position_summary
from .dates import isoformat
from .finance.cashflow import classify
from .finance.twr import twr_steps
from .validate import normalize_transactions, position_currency
from .types import PositionSummary


# ------------------------------
# Small helpers (no policy here)
# ------------------------------
def _position_meta(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": data.get("id") or data.get("position_id") or "",
        "name": data.get("name") or "",
        "strategy": data.get("strategy") or "",
        "currency": position_currency(data),
    }


def _valuation(data: Dict[str, Any]) -> tuple[Any, Any]:
    return data.get("ending_value"), data.get("as_of")


# ------------------------------
# Public adapter(s)
# ------------------------------
def run_position(data: Dict[str, Any]) -> PositionSummary:
    """
    High-level adapter for one flattened ledger document:
      1) Scope the rows to the position currency (others are dropped, logged).
      2) Hand the rows and valuation to the engine facade.
    Validation is the caller's job; this never raises on row content.
    """
    meta = _position_meta(data)
    txs = normalize_transactions(data.get("transactions") or [], currency=meta["currency"])
    ending_value, as_of = _valuation(data)
    return build_position_summary(meta, txs, ending_value=ending_value, as_of_date=as_of)


def position_trace(data: Dict[str, Any], *, as_of: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
    """
    Per-position audit rows: the IRR cashflows (investor sign) and the TWR
    NAV simulation steps. `as_of` pins the terminal cashflow date so the trace
    matches a summary computed earlier.
    """
    meta = _position_meta(data)
    txs = normalize_transactions(data.get("transactions") or [], currency=meta["currency"])
    ending_value, data_as_of = _valuation(data)

    cashflows = classify(txs, ending_value=ending_value, as_of_date=as_of or data_as_of)
    _factor, _nav, steps = twr_steps(txs, ending_value=ending_value)
    return {
        "cashflows": [
            {"position_id": meta["id"], "date": isoformat(cf.date), "amount": cf.amount}
            for cf in cashflows
        ],
        "twr_steps": [
            {
                "position_id": meta["id"],
                "date": isoformat(s.date),
                "type": s.type,
                "amount": s.amount,
                "nav_before": s.nav_before,
                "nav_after": s.nav_after,
                "period_factor": s.period_factor,
                "twr_factor": s.twr_factor,
            }
            for s in steps
        ],
    }
