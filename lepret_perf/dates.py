"""
Date parsing for ledger rows.

Rows come from the data layer as ISO timestamps most of the time, but
spreadsheet exports and hand-written YAML ledgers also show up, so a few
common layouts are accepted. Parsing never raises: callers decide what an
unparseable date means (the IRR classifier drops the row, the TWR solver
sorts it first).
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional

SECONDS_PER_DAY = 24 * 60 * 60
DAYS_PER_YEAR = 365.0  # actual/365, no leap-year adjustment

_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M:%S",
)


def _as_utc(dt: datetime) -> Optional[datetime]:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError:
        # the UTC instant falls outside years 1..9999
        return None


def parse_date(value: Any) -> Optional[datetime]:
    """Return an aware UTC datetime, or None when the value is not a date."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str):
        return None

    s = value.strip()
    if not s:
        return None
    if s.endswith("Z") or s.endswith("z"):
        s = s[:-1] + "+00:00"
    try:
        return _as_utc(datetime.fromisoformat(s))
    except (ValueError, OverflowError):
        pass
    for fmt in _FORMATS:
        try:
            return _as_utc(datetime.strptime(s, fmt))
        except (ValueError, OverflowError):
            continue
    return None


def year_fraction(start: datetime, end: datetime) -> float:
    """Elapsed time in years, actual days / 365."""
    return (end - start).total_seconds() / SECONDS_PER_DAY / DAYS_PER_YEAR


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt is not None else None
