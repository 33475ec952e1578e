"""Investor performance engine: IRR and time-weighted return over a position ledger."""

from .core import (
    build_position_summary,
    calculate_internal_rate_of_return,
    calculate_internal_rate_of_return_detailed,
    calculate_time_weighted_return,
)
from .types import Cashflow, IrrResult, PositionSummary, Transaction, TransactionType, TwrStep

__version__ = "0.1.0"

__all__ = [
    "calculate_internal_rate_of_return",
    "calculate_internal_rate_of_return_detailed",
    "calculate_time_weighted_return",
    "build_position_summary",
    "Cashflow",
    "IrrResult",
    "PositionSummary",
    "Transaction",
    "TransactionType",
    "TwrStep",
]
