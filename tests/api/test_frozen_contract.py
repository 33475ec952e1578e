import importlib
import inspect
from pathlib import Path


def _param_names(fn):
    return [p.name for p in inspect.signature(fn).parameters.values()]


def test_finance_irr_public_api_is_stable():
    """Lock down that IRR/NPV live in finance.irr with a stable entrypoint."""
    m = importlib.import_module("lepret_perf.finance.irr")
    assert hasattr(m, "irr") and callable(m.irr)
    assert hasattr(m, "npv") and callable(m.npv)

    # Keep the first parameter name stable to avoid accidental API churn.
    irr_params = _param_names(m.irr)
    assert len(irr_params) >= 1
    assert irr_params[0] == "cashflows"

    # Guard against accidental coupling/import creep in the thin math module.
    src = Path(m.__file__).read_text(encoding="utf-8")
    for forbidden in ("from lepret_perf", "import yaml", "twr"):
        assert forbidden not in src, f"Unexpected dependency '{forbidden}' inside finance/irr.py"


def test_core_entrypoints_are_stable():
    core = importlib.import_module("lepret_perf.core")
    assert _param_names(core.calculate_internal_rate_of_return) == [
        "transactions", "ending_value", "as_of_date",
    ]
    assert _param_names(core.calculate_time_weighted_return) == ["transactions", "ending_value"]

    pkg = importlib.import_module("lepret_perf")
    assert pkg.calculate_internal_rate_of_return is core.calculate_internal_rate_of_return
    assert pkg.calculate_time_weighted_return is core.calculate_time_weighted_return


def test_adapters_run_position_api_and_result_shape():
    """Adapters.run_position must exist and return a summary with core keys."""
    a = importlib.import_module("lepret_perf.adapters")
    assert hasattr(a, "run_position") and callable(a.run_position)

    data = {
        "id": "p1",
        "ending_value": 1100,
        "as_of": "2024-01-01",
        "transactions": [{"type": "contribution", "amount": 1000, "date": "2023-01-01"}],
    }
    row = a.run_position(data).as_row()
    assert isinstance(row, dict)
    for k in ("position_id", "irr", "time_weighted_return", "invested_amount", "current_value"):
        assert k in row


def test_validate_exports_are_stable():
    """validate module must expose these helpers (names kept stable)."""
    v = importlib.import_module("lepret_perf.validate")
    for name in ("validate_ledger_dict", "load_ledger_file", "normalize_transactions"):
        obj = getattr(v, name, None)
        assert callable(obj), f"Missing or non-callable export: {name}"


def test_runner_run_dir_api_minimal(tmp_path):
    """run_dir must accept (cfg_path, out_dir, ...) and return a summary-like object."""
    r = importlib.import_module("lepret_perf.runner")
    assert hasattr(r, "run_dir") and callable(r.run_dir)

    cfg = tmp_path / "cfg.yaml"
    cfg.write_text(
        "position: { id: p1, currency: COP }\n"
        "transactions:\n"
        "  - { type: contribution, amount: 100, date: '2023-01-01' }\n"
        "  - { type: distribution, amount: 110, date: '2024-01-01' }\n",
        encoding="utf-8",
    )
    out = tmp_path / "o"
    out.mkdir(parents=True, exist_ok=True)

    res = r.run_dir(cfg, out, mode="irr", fmt="jsonl", save_steps=False)
    summary = getattr(res, "summary", res)
    assert isinstance(summary, dict)
    assert "irr" in summary
    assert "time_weighted_return" not in summary
