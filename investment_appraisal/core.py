# investment_appraisal/core.py
"""
Top-level metrics computation: validate, project cash flows, evaluate.
"""

from __future__ import annotations
from typing import Optional

from .finance.cashflow import build_cash_flows
from .finance.irr import SolverSettings
from .finance.metrics import npv, irr, payback_period, roi
from .types import FinancialInputs, FinancialMetrics
from .validate import check_inputs


def compute_financial_metrics(
    inputs: FinancialInputs, settings: Optional[SolverSettings] = None
) -> FinancialMetrics:
    """
    Raises InvalidInputError (naming the offending fields) before any cash
    flow is generated. A non-converging IRR is not an error; inspect
    `irr_solution` on the result.
    """
    check_inputs(inputs)

    rows = build_cash_flows(inputs)
    investment = float(inputs.initial_investment)

    solution = irr(rows, investment, settings)
    payback = payback_period(rows, investment)

    return FinancialMetrics(
        irr=solution.percent,
        npv=npv(rows, inputs.discount_rate, investment),
        payback_period=payback,
        roi=roi(rows, investment),
        irr_solution=solution,
        payback_within_horizon=payback <= inputs.project_duration,
    )
