# lepret_perf/finance/cashflow.py
"""
Cashflow classifier: ledger rows -> signed, dated cashflows for the IRR solver.

Sign convention is the investor's perspective:
    contribution, fee         -> negative (cash leaving the investor)
    distribution, interest    -> positive (cash returned / income)

Malformed rows are dropped, never raised on, so one bad row cannot abort a
whole-portfolio report.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from lepret_perf.dates import parse_date, utc_now
from lepret_perf.types import Cashflow, TransactionType, as_transaction

logger = logging.getLogger(__name__)

OUTFLOW_TYPES = frozenset({TransactionType.CONTRIBUTION, TransactionType.FEE})
INFLOW_TYPES = frozenset({TransactionType.DISTRIBUTION, TransactionType.INTEREST})


def as_finite_float(value: Any) -> Optional[float]:
    """float(value) when it is a finite number, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        x = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return x if math.isfinite(x) else None


def signed_amount(tx_type: Any, amount: Any) -> Optional[float]:
    """Apply the per-type sign rule to the stored magnitude; None if unusable."""
    kind = TransactionType.parse(tx_type)
    x = as_finite_float(amount)
    if kind is None or x is None:
        return None
    if kind in OUTFLOW_TYPES:
        return -abs(x)
    return abs(x)


def classify(
    transactions: Iterable[Any],
    *,
    ending_value: Any = None,
    as_of_date: Any = None,
) -> List[Cashflow]:
    """
    Build the sorted cashflow list used by the IRR solver.

    If ending_value is a finite number it is appended *unsigned* as a terminal
    cashflow dated as_of_date (default: now). Sorting is stable, so same-day
    rows keep their input order.
    """
    out: List[Cashflow] = []
    for raw in transactions or []:
        tx = as_transaction(raw)
        when = parse_date(tx.date)
        if when is None:
            logger.debug("dropping row with unparseable date: %r", tx.date)
            continue
        amt = signed_amount(tx.type, tx.amount)
        if amt is None:
            logger.debug("dropping unclassifiable row: type=%r amount=%r", tx.type, tx.amount)
            continue
        if amt == 0.0:
            continue
        out.append(Cashflow(amount=amt, date=when))

    terminal = as_finite_float(ending_value)
    if terminal is not None:
        as_of: Optional[datetime] = utc_now() if as_of_date is None else parse_date(as_of_date)
        if as_of is None:
            logger.debug("dropping terminal value, unparseable as-of date: %r", as_of_date)
        else:
            out.append(Cashflow(amount=terminal, date=as_of))

    out.sort(key=lambda cf: cf.date)
    return out


def ledger_totals(transactions: Iterable[Any]) -> Dict[str, float]:
    """
    Gross magnitudes per type over rows with a usable amount.
    Date validity is not required here; totals describe the ledger as booked.
    """
    totals = {t.value: 0.0 for t in TransactionType}
    for raw in transactions or []:
        tx = as_transaction(raw)
        kind = tx.kind
        x = as_finite_float(tx.amount)
        if kind is None or x is None:
            continue
        totals[kind.value] += abs(x)
    return totals
