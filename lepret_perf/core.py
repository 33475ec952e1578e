# lepret_perf/core.py
"""
Public boundary of the performance engine.

Pure functions: no I/O, no global state, and no exceptions for any ledger
content. Callers get a number or None ("not available").
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

from .dates import isoformat, parse_date, utc_now
from .finance.cashflow import as_finite_float, classify, ledger_totals
from .finance.metrics import modified_dietz_return, solve_irr, time_weighted_return
from .types import IrrResult, PositionSummary, as_transaction


def calculate_internal_rate_of_return_detailed(
    transactions: Iterable[Any],
    *,
    ending_value: Any = None,
    as_of_date: Any = None,
) -> IrrResult:
    """IRR plus convergence diagnostics (see IrrResult.reason)."""
    return solve_irr(classify(transactions, ending_value=ending_value, as_of_date=as_of_date))


def calculate_internal_rate_of_return(
    transactions: Iterable[Any],
    *,
    ending_value: Any = None,
    as_of_date: Any = None,
) -> Optional[float]:
    """Annualized IRR in percent, or None when undefined."""
    return calculate_internal_rate_of_return_detailed(
        transactions, ending_value=ending_value, as_of_date=as_of_date
    ).value


def calculate_time_weighted_return(
    transactions: Iterable[Any],
    *,
    ending_value: Any = None,
) -> Optional[float]:
    """Chain-linked TWR in percent over the ledger horizon, or None when undefined."""
    return time_weighted_return(transactions, ending_value=ending_value)


def build_position_summary(
    position: Mapping[str, Any],
    transactions: Iterable[Any],
    *,
    ending_value: Any = None,
    as_of_date: Any = None,
) -> PositionSummary:
    """
    One investor-portal position row: capital totals and the three return
    figures computed over the same ledger.
    """
    txs = [as_transaction(t) for t in transactions or []]
    totals: Dict[str, float] = ledger_totals(txs)
    current = as_finite_float(ending_value)

    as_of = None
    if current is not None:
        as_of = utc_now() if as_of_date is None else parse_date(as_of_date)

    # Pin "now" once so the IRR terminal flow and the reported as-of agree.
    irr_res = calculate_internal_rate_of_return_detailed(
        txs, ending_value=ending_value, as_of_date=as_of or as_of_date
    )
    used = len(classify(txs))

    dietz = None
    if current is not None:
        dietz = modified_dietz_return(txs, ending_value=current, valuation_date=as_of)

    return PositionSummary(
        position_id=str(position.get("id") or ""),
        name=str(position.get("name") or ""),
        strategy=str(position.get("strategy") or ""),
        currency=str(position.get("currency") or "COP").upper(),
        invested_amount=totals["contribution"],
        distributed_amount=totals["distribution"],
        interest_amount=totals["interest"],
        fee_amount=totals["fee"],
        current_value=current,
        as_of=isoformat(as_of),
        irr=irr_res.value,
        irr_converged=irr_res.converged,
        time_weighted_return=calculate_time_weighted_return(txs, ending_value=ending_value),
        modified_dietz_return=dietz,
        transactions_used=used,
        transactions_total=len(txs),
    )


__all__ = [
    "calculate_internal_rate_of_return",
    "calculate_internal_rate_of_return_detailed",
    "calculate_time_weighted_return",
    "build_position_summary",
]
