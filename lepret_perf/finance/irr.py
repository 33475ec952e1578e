# lepret_perf/finance/irr.py
from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

from ..dates import year_fraction
from ..types import Cashflow, IrrResult

logger = logging.getLogger(__name__)

INITIAL_GUESS = 0.10
MAX_ITERATIONS = 100
TOLERANCE = 1e-7
DERIVATIVE_FLOOR = 1e-12
# Keeps (1+r) strictly positive: no division blow-up, no negative base ** fractional t.
RATE_FLOOR = -0.9999999999


def _discounted(amount: float, base: float, exponent: float) -> float:
    """amount / base**exponent with IEEE overflow/underflow instead of exceptions."""
    try:
        denom = base ** exponent
    except OverflowError:
        return 0.0 * amount
    if denom == 0.0:
        return math.copysign(math.inf, amount) if amount else math.nan
    return amount / denom


def _year_offsets(cashflows: Sequence[Cashflow]) -> List[float]:
    """t_i in years (actual/365) from the earliest cashflow date."""
    base = min(cf.date for cf in cashflows)
    return [year_fraction(base, cf.date) for cf in cashflows]


# ---------- NPV ----------
def npv(rate: float, cashflows: Sequence[Cashflow]) -> float:
    """
    Dated discounted cash flow:
        NPV(r) = sum_i CF[i] / (1+r)^t_i ,  t_i = days(base, date_i) / 365
    """
    if not cashflows:
        return 0.0
    r = max(float(rate), RATE_FLOOR)
    total = 0.0
    for t, cf in zip(_year_offsets(cashflows), cashflows):
        total += _discounted(cf.amount, 1.0 + r, t)
    return total


def npv_derivative(rate: float, cashflows: Sequence[Cashflow]) -> float:
    """d NPV / d r = sum_i -t_i * CF[i] / (1+r)^(t_i+1); base-date terms are zero."""
    if not cashflows:
        return 0.0
    r = max(float(rate), RATE_FLOOR)
    total = 0.0
    for t, cf in zip(_year_offsets(cashflows), cashflows):
        if t == 0:
            continue
        total += _discounted(-t * cf.amount, 1.0 + r, t + 1.0)
    return total


# ---------- IRR (dated, Newton-Raphson) ----------
def solve_irr(
    cashflows: Sequence[Cashflow],
    *,
    guess: float = INITIAL_GUESS,
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = TOLERANCE,
    derivative_floor: float = DERIVATIVE_FLOOR,
    rate_floor: float = RATE_FLOOR,
) -> IrrResult:
    """
    Annualized rate r with NPV(r) = 0, as a percentage.

    Returns value=None when there are no cashflows or no sign change. A flat
    derivative or an exhausted iteration budget still returns the current
    estimate; `converged` tells the two cases apart from a real root.
    """
    if not cashflows:
        return IrrResult(value=None, converged=False, iterations=0, reason="no_cashflows")

    has_positive = any(cf.amount > 0 for cf in cashflows)
    has_negative = any(cf.amount < 0 for cf in cashflows)
    if not (has_positive and has_negative):
        return IrrResult(value=None, converged=False, iterations=0, reason="no_sign_change")

    offsets = _year_offsets(cashflows)
    amounts = [cf.amount for cf in cashflows]

    r = float(guess)
    for i in range(max_iterations):
        r = max(r, rate_floor)
        f = 0.0
        df = 0.0
        for t, a in zip(offsets, amounts):
            f += _discounted(a, 1.0 + r, t)
            if t != 0:
                df += _discounted(-t * a, 1.0 + r, t + 1.0)

        if abs(df) < derivative_floor:
            logger.debug("irr: derivative %.3e below floor at r=%.10f (iter %d)", df, r, i + 1)
            return IrrResult(value=r * 100.0, converged=False, iterations=i + 1, reason="flat_derivative")

        r_next = r - f / df
        if not math.isfinite(r_next):
            logger.debug("irr: step left the finite range at r=%.10g (iter %d)", r, i + 1)
            return IrrResult(value=r * 100.0, converged=False, iterations=i + 1, reason="diverged")
        if abs(r_next - r) <= tolerance:
            return IrrResult(value=r_next * 100.0, converged=True, iterations=i + 1, reason="converged")
        r = r_next

    logger.debug("irr: no convergence after %d iterations, last r=%.10f", max_iterations, r)
    return IrrResult(value=r * 100.0, converged=False, iterations=max_iterations, reason="max_iterations")


def irr(cashflows: Sequence[Cashflow]) -> Optional[float]:
    """Annualized IRR in percent (12.5 == 12.5%), or None when undefined."""
    return solve_irr(cashflows).value


__all__ = [
    "npv",
    "npv_derivative",
    "solve_irr",
    "irr",
]
