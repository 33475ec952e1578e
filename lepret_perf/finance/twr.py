# lepret_perf/finance/twr.py
"""
Time-weighted return by NAV simulation.

Walk the ledger in date order keeping a running net asset value. Capital
movements (contribution, distribution) change the NAV only; performance
events (interest, fee) are period returns scaled by the capital at risk at
that instant and are chain-linked into a growth factor.

    twr_factor = prod(1 + period_return)
    TWR %      = (twr_factor - 1) * 100
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Tuple

from lepret_perf.dates import parse_date
from lepret_perf.finance.cashflow import as_finite_float
from lepret_perf.types import TransactionType, TwrStep, as_transaction

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _sort_key(tx) -> datetime:
    # Unparseable dates sort at epoch 0 and are KEPT, unlike the IRR classifier
    # which drops them. Intentional but inconsistent; both behaviours are relied on.
    return parse_date(tx.date) or _EPOCH


def twr_steps(
    transactions: Iterable[Any],
    *,
    ending_value: Any = None,
) -> Tuple[float, float, List[TwrStep]]:
    """
    Run the NAV simulation and return (twr_factor, final_nav, steps).

    `steps` records every transaction that touched the ledger plus, when it
    applies, the final mark-to-market fold-in (type "valuation").
    """
    txs = sorted((as_transaction(t) for t in transactions or []), key=_sort_key)

    nav = 0.0
    factor = 1.0
    steps: List[TwrStep] = []

    for tx in txs:
        amount = as_finite_float(tx.amount)
        if amount is None or amount <= 0:
            continue
        kind = tx.kind
        if kind is None:
            logger.debug("twr: ignoring row of unknown type %r", tx.type)
            continue

        before = nav
        period = 1.0
        if kind is TransactionType.CONTRIBUTION:
            nav += amount
        elif kind is TransactionType.DISTRIBUTION:
            nav = max(nav - amount, 0.0)
        elif kind is TransactionType.INTEREST:
            if nav > 0:
                period = 1.0 + amount / nav
                factor *= period
            # NAV keeps tracking income even when no return could be attributed.
            nav += amount
        elif kind is TransactionType.FEE:
            if nav > 0:
                effective = min(amount, nav)
                period = 1.0 - effective / nav
                factor *= period
                nav -= effective

        steps.append(
            TwrStep(
                date=parse_date(tx.date),
                type=kind.value,
                amount=amount,
                nav_before=before,
                nav_after=nav,
                period_factor=period,
                twr_factor=factor,
            )
        )

    terminal = as_finite_float(ending_value)
    if terminal is not None and terminal >= 0:
        before = nav
        period = 1.0
        if nav > 0:
            ratio = terminal / nav
            if ratio > 0:
                period = ratio
                factor *= ratio
        nav = terminal
        steps.append(
            TwrStep(
                date=None,
                type="valuation",
                amount=terminal,
                nav_before=before,
                nav_after=nav,
                period_factor=period,
                twr_factor=factor,
            )
        )

    return factor, nav, steps


def time_weighted_return(
    transactions: Iterable[Any],
    *,
    ending_value: Any = None,
) -> Optional[float]:
    """
    TWR in percent over the whole ledger horizon, or None when undefined.

    Undefined means: no transactions and no ending value, a chain-linked
    factor <= 0 (e.g. a fee that wiped out the NAV), or no row ever put the
    NAV above zero. The last rule also covers ledgers of only fees or only
    an ending value, which return None rather than 0%.
    """
    txs = list(transactions or [])
    if not txs and ending_value is None:
        return None

    factor, _nav, steps = twr_steps(txs, ending_value=ending_value)

    # No row ever put capital at risk: there is no period to link.
    if not any(s.nav_after > 0 for s in steps if s.type != "valuation"):
        return None
    if factor <= 0:
        return None
    return (factor - 1.0) * 100.0


__all__ = ["twr_steps", "time_weighted_return"]
