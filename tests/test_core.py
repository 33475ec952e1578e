import pytest

from lepret_perf.core import build_position_summary

POSITION = {"id": "pos-2", "name": "Linea Credito Pymes", "strategy": "Credito", "currency": "cop"}

LEDGER = [
    {"type": "contribution", "amount": 1000, "date": "2023-01-01"},
    {"type": "interest", "amount": 100, "date": "2023-04-01"},
    {"type": "contribution", "amount": 900, "date": "2023-07-01"},
    {"type": "fee", "amount": 100, "date": "2023-10-01"},
    {"type": "interest", "amount": 7, "date": None},
]


def test_position_summary_totals_and_returns():
    s = build_position_summary(POSITION, LEDGER[:4], ending_value=1995, as_of_date="2024-01-01")
    assert s.position_id == "pos-2"
    assert s.currency == "COP"
    assert s.invested_amount == 1900.0
    assert s.interest_amount == 100.0
    assert s.fee_amount == 100.0
    assert s.distributed_amount == 0.0
    assert s.current_value == 1995.0
    assert s.as_of == "2024-01-01T00:00:00+00:00"
    assert s.time_weighted_return == pytest.approx(9.725)
    assert s.irr is not None and s.irr_converged
    assert s.modified_dietz_return is not None
    assert s.transactions_used == 4 and s.transactions_total == 4


def test_position_summary_counts_dropped_rows():
    s = build_position_summary(POSITION, LEDGER, ending_value=1995, as_of_date="2024-01-01")
    assert s.transactions_total == 5
    assert s.transactions_used == 4
    # totals describe the ledger as booked, dated or not
    assert s.interest_amount == 107.0


def test_position_summary_without_valuation():
    s = build_position_summary(POSITION, LEDGER[:1])
    assert s.current_value is None and s.as_of is None
    assert s.irr is None and s.irr_converged is False
    assert s.time_weighted_return == 0.0
    assert s.modified_dietz_return is None


def test_position_summary_pins_now_once():
    s = build_position_summary(POSITION, LEDGER[:1], ending_value=1000)
    assert s.as_of is not None
    assert s.irr is not None


def test_as_row_flattens_extra():
    s = build_position_summary(POSITION, [])
    s.extra["source"] = "x.yaml"
    row = s.as_row()
    assert row["source"] == "x.yaml"
    assert "extra" not in row
    assert row["irr"] is None and row["time_weighted_return"] is None
