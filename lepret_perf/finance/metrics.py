"""
Finance metrics façade.

Design:
- IRR/NPV implementations live only in lepret_perf.finance.irr (singleton).
- This module must not *define* irr/npv (no 'def irr' / 'def npv' here).
- It re-exports the solvers used by the facade, the runner and tests.
"""
from .irr import npv as npv, irr as irr, solve_irr as solve_irr  # re-exports only
from .twr import time_weighted_return as time_weighted_return, twr_steps as twr_steps
from .dietz import modified_dietz_return as modified_dietz_return

__all__ = ["npv", "irr", "solve_irr", "time_weighted_return", "twr_steps", "modified_dietz_return"]
