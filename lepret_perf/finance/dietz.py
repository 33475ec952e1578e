# lepret_perf/finance/dietz.py
"""
Modified Dietz return for a position, portfolio perspective.

Contributions and fees are money put into the position, distributions and
interest are money taken out of it:

    R = (EMV - BMV - sum F_i) / (BMV + sum w_i * F_i)
    w_i = days(date_i, end) / days(start, end), clamped to [0, 1]

Reported next to the chain-linked TWR as a cross-check; it is the approximate
figure the investor portal showed before the NAV simulation existed.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Optional

from lepret_perf.dates import SECONDS_PER_DAY, parse_date
from lepret_perf.finance.cashflow import INFLOW_TYPES, as_finite_float
from lepret_perf.types import Cashflow, as_transaction


def portfolio_cashflows(transactions: Iterable[Any]) -> List[Cashflow]:
    out: List[Cashflow] = []
    for raw in transactions or []:
        tx = as_transaction(raw)
        when = parse_date(tx.date)
        kind = tx.kind
        x = as_finite_float(tx.amount)
        if when is None or kind is None or x is None:
            continue
        amount = abs(x)
        if kind in INFLOW_TYPES:
            amount = -amount
        out.append(Cashflow(amount=amount, date=when))
    out.sort(key=lambda cf: cf.date)
    return out


def modified_dietz_return(
    transactions: Iterable[Any],
    *,
    ending_value: Any = 0.0,
    valuation_date: Any = None,
    beginning_value: Any = 0.0,
) -> Optional[float]:
    """Period return in percent, or None when there is no period or no capital base."""
    flows = portfolio_cashflows(transactions)
    end = parse_date(valuation_date) or (flows[-1].date if flows else None)
    if end is None:
        return None

    emv = as_finite_float(ending_value) or 0.0
    bmv = as_finite_float(beginning_value) or 0.0
    start = flows[0].date if flows else end
    total_days = max((end - start).total_seconds() / SECONDS_PER_DAY, 0.0)

    total_flows = sum(f.amount for f in flows)
    weighted = 0.0
    if total_days != 0:
        for f in flows:
            remaining = (end - f.date).total_seconds() / SECONDS_PER_DAY
            weighted += f.amount * max(min(remaining / total_days, 1.0), 0.0)

    denominator = bmv + weighted
    if denominator == 0:
        return None
    return (emv - bmv - total_flows) / denominator * 100.0
