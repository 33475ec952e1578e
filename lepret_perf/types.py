# lepret_perf/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional


class TransactionType(str, Enum):
    CONTRIBUTION = "contribution"
    DISTRIBUTION = "distribution"
    INTEREST = "interest"
    FEE = "fee"

    @classmethod
    def parse(cls, value: Any) -> Optional["TransactionType"]:
        """Closed enum lookup; anything unknown is None (never raises)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class Transaction:
    """
    One ledger row of a position, as supplied by the data layer.

    type/amount/date are kept raw on purpose: the solvers apply their own
    drop/skip policy (a bad row must never abort a report).
    """
    type: Any
    amount: Any
    date: Any
    currency: str = "COP"
    description: str = ""
    position_id: Optional[str] = None
    id: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "Transaction":
        pid = row.get("position_id", row.get("positionId"))
        tid = row.get("id")
        return cls(
            type=row.get("type"),
            amount=row.get("amount"),
            date=row.get("date"),
            currency=str(row.get("currency") or "COP").strip().upper() or "COP",
            description=str(row.get("description") or ""),
            position_id=str(pid) if pid is not None else None,
            id=str(tid) if tid is not None else None,
        )

    @property
    def kind(self) -> Optional[TransactionType]:
        return TransactionType.parse(self.type)


@dataclass(frozen=True)
class Cashflow:
    amount: float
    date: datetime


@dataclass(frozen=True)
class IrrResult:
    value: Optional[float]  # annualized percentage (12.5 == 12.5%)
    converged: bool
    iterations: int
    reason: str


@dataclass(frozen=True)
class TwrStep:
    date: Optional[datetime]
    type: str
    amount: float
    nav_before: float
    nav_after: float
    period_factor: float
    twr_factor: float


@dataclass
class PositionSummary:
    position_id: str
    name: str
    currency: str
    invested_amount: float
    distributed_amount: float
    interest_amount: float
    fee_amount: float
    current_value: Optional[float]
    as_of: Optional[str]
    irr: Optional[float]
    irr_converged: bool
    time_weighted_return: Optional[float]
    modified_dietz_return: Optional[float]
    transactions_used: int
    transactions_total: int
    strategy: str = ""
    error: str = ""
    extra: dict = field(default_factory=dict)

    def as_row(self) -> dict:
        row = {k: v for k, v in self.__dict__.items() if k != "extra"}
        row.update(self.extra)
        return row


TransactionLike = Any  # Transaction or a mapping with type/amount/date keys


def as_transaction(tx: TransactionLike) -> Transaction:
    if isinstance(tx, Transaction):
        return tx
    if isinstance(tx, Mapping):
        return Transaction.from_mapping(tx)
    return Transaction(
        type=getattr(tx, "type", None),
        amount=getattr(tx, "amount", None),
        date=getattr(tx, "date", None),
    )
