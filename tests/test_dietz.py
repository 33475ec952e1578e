import pytest

from lepret_perf.finance.metrics import modified_dietz_return


def _tx(t, amount, date):
    return {"type": t, "amount": amount, "date": date}


def test_dietz_single_contribution():
    txs = [_tx("contribution", 1000, "2023-01-01")]
    assert modified_dietz_return(txs, ending_value=1100, valuation_date="2024-01-01") == pytest.approx(10.0)


def test_dietz_weights_mid_period_flows():
    txs = [_tx("contribution", 1000, "2023-01-01"), _tx("distribution", 200, "2023-07-02")]
    got = modified_dietz_return(txs, ending_value=900, valuation_date="2024-01-01")
    # 183 of 365 days remain after the distribution
    assert got == pytest.approx(100 / (1000 - 200 * 183 / 365) * 100)


def test_dietz_interest_counts_as_money_out():
    txs = [_tx("contribution", 1000, "2023-01-01"), _tx("interest", 100, "2024-01-01")]
    assert modified_dietz_return(txs, ending_value=1000, valuation_date="2024-01-01") == pytest.approx(10.0)


def test_dietz_undefined_cases():
    assert modified_dietz_return([], ending_value=100) is None
    # every flow on the valuation date: nothing was invested over the period
    txs = [_tx("contribution", 1000, "2024-01-01")]
    assert modified_dietz_return(txs, ending_value=1000, valuation_date="2024-01-01") is None


def test_dietz_defaults_end_to_last_flow():
    txs = [_tx("contribution", 1000, "2023-01-01"), _tx("distribution", 1100, "2024-01-01")]
    assert modified_dietz_return(txs) == pytest.approx(10.0)
