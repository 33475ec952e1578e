import random

import pytest

from lepret_perf import calculate_time_weighted_return as twr_pct
from lepret_perf.finance.twr import twr_steps


def _tx(t, amount, date):
    return {"type": t, "amount": amount, "currency": "COP", "date": date}


CHAIN = [
    _tx("contribution", 1000, "2023-01-01"),
    _tx("interest", 100, "2023-04-01"),
    _tx("contribution", 900, "2023-07-01"),
    _tx("fee", 100, "2023-10-01"),
]


def test_twr_pure_capital_is_zero():
    txs = [
        _tx("contribution", 1000, "2023-01-01"),
        _tx("contribution", 500, "2023-03-01"),
        _tx("distribution", 700, "2023-09-01"),
    ]
    assert twr_pct(txs) == 0.0


def test_twr_simple_interest_period():
    txs = [_tx("contribution", 1000, "2023-01-01"), _tx("interest", 100, "2023-12-31")]
    factor, nav, _steps = twr_steps(txs)
    assert factor == pytest.approx(1.10)
    assert nav == pytest.approx(1100.0)
    assert twr_pct(txs) == pytest.approx(10.0)


def test_twr_chain_links_interest_fee_and_valuation():
    # 1.10 (interest on 1000) * 0.95 (fee on 2000) * 1.05 (1995 / 1900)
    assert twr_pct(CHAIN, ending_value=1995) == pytest.approx(9.725)
    _factor, _nav, steps = twr_steps(CHAIN, ending_value=1995)
    assert [s.type for s in steps] == ["contribution", "interest", "contribution", "fee", "valuation"]
    assert [s.nav_after for s in steps] == pytest.approx([1000, 1100, 2000, 1900, 1995])


def test_twr_fee_capped_at_nav():
    txs = [_tx("contribution", 100, "2023-01-01"), _tx("fee", 150, "2023-02-01")]
    factor, nav, steps = twr_steps(txs)
    fee = steps[-1]
    assert fee.nav_before == 100.0
    assert fee.nav_after == 0.0
    assert fee.period_factor == 0.0
    assert factor == 0.0 and nav == 0.0
    # a wiped-out factor is not a representable return
    assert twr_pct(txs) is None


def test_twr_fee_on_empty_nav_is_absorbed():
    txs = [_tx("fee", 10, "2023-01-01"), _tx("contribution", 100, "2023-02-01"),
           _tx("interest", 10, "2023-03-01")]
    assert twr_pct(txs) == pytest.approx(10.0)


def test_twr_distribution_floors_nav_at_zero():
    txs = [_tx("contribution", 100, "2023-01-01"), _tx("distribution", 250, "2023-02-01")]
    _factor, nav, _steps = twr_steps(txs)
    assert nav == 0.0
    assert twr_pct(txs) == 0.0


def test_twr_interest_on_zero_nav_still_builds_nav():
    txs = [_tx("interest", 50, "2023-01-01"), _tx("interest", 5, "2023-02-01")]
    _factor, _nav, steps = twr_steps(txs)
    assert steps[0].period_factor == 1.0 and steps[0].nav_after == 50.0
    assert twr_pct(txs) == pytest.approx(10.0)


def test_twr_unparseable_dates_sort_first_and_are_kept():
    txs = [_tx("contribution", 1000, "2023-01-01"), _tx("interest", 100, "garbage")]
    _factor, _nav, steps = twr_steps(txs)
    assert steps[0].type == "interest" and steps[0].date is None
    # the interest landed on an empty NAV, so no return is attributed
    assert twr_pct(txs) == 0.0


def test_twr_skips_non_positive_and_unknown_rows():
    noisy = CHAIN + [
        _tx("interest", 0, "2023-05-01"),
        _tx("interest", -20, "2023-05-01"),
        _tx("fee", float("inf"), "2023-05-01"),
        _tx("dividend", 40, "2023-05-01"),
        _tx("fee", None, "2023-05-01"),
    ]
    assert twr_pct(noisy, ending_value=1995) == twr_pct(CHAIN, ending_value=1995)


def test_twr_empty_input():
    assert twr_pct([]) is None
    # no transaction ever put capital at risk: nothing to fold the value into
    assert twr_pct([], ending_value=100) is None


def test_twr_ending_value_fold_in():
    txs = [_tx("contribution", 1000, "2023-01-01")]
    assert twr_pct(txs, ending_value=1100) == pytest.approx(10.0)
    # a zero valuation has no positive ratio to fold in
    assert twr_pct(txs, ending_value=0) == 0.0
    # negative or non-finite valuations are ignored
    assert twr_pct(txs, ending_value=-5) == 0.0
    assert twr_pct(txs, ending_value=float("nan")) == 0.0


def test_twr_is_order_independent():
    shuffled = list(CHAIN)
    random.Random(3).shuffle(shuffled)
    assert twr_pct(shuffled, ending_value=1995) == twr_pct(CHAIN, ending_value=1995)
    assert twr_pct(CHAIN, ending_value=1995) == twr_pct(CHAIN, ending_value=1995)


def test_twr_skips_amounts_too_large_for_a_float():
    assert twr_pct([_tx("contribution", 10 ** 400, "2023-01-01")]) is None
    noisy = CHAIN + [_tx("interest", 10 ** 400, "2023-05-01")]
    assert twr_pct(noisy, ending_value=1995) == twr_pct(CHAIN, ending_value=1995)
    assert twr_pct(CHAIN, ending_value=10 ** 400) == twr_pct(CHAIN)


def test_twr_sorts_out_of_range_dates_first():
    txs = [_tx("contribution", 1000, "2023-01-01"), _tx("interest", 100, "0001-01-01T00:00:00+05:00")]
    _factor, _nav, steps = twr_steps(txs)
    assert steps[0].type == "interest" and steps[0].date is None
    assert twr_pct(txs) == 0.0


def test_twr_fee_only_ledger_is_undefined():
    assert twr_pct([_tx("fee", 10, "2023-01-01")]) is None
