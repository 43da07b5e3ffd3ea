"""
Finance metrics façade.

Design:
- IRR/NPV implementations live only in investment_appraisal.finance.irr (singleton).
- This module must not *define* irr/npv; it re-exports them next to the
  undiscounted metrics (payback, ROI) that share the same cash-flow series.
"""
from __future__ import annotations

import math
from typing import Sequence

from investment_appraisal.types import CashFlowPeriod
from .irr import npv as npv, irr as irr, IRRResult as IRRResult  # re-exports only

PAYBACK_UNRECOVERABLE = math.inf


def payback_period(cashflows: Sequence[CashFlowPeriod], initial_investment: float) -> float:
    """
    Fractional periods until cumulative net flow covers the investment,
    assuming cash arrives evenly within a period.

    Past the horizon the last period's net flow is used as a run rate, so the
    result can exceed the project duration. Returns PAYBACK_UNRECOVERABLE
    when that run rate is not positive (the investment is never recovered).
    """
    target = float(initial_investment)
    cumulative = 0.0
    for cf in cashflows:
        before = cumulative
        cumulative += cf.net_flow
        if cumulative >= target:
            if cf.net_flow <= 0:
                # only reachable when nothing was owed at period start
                return float(cf.period - 1)
            return (cf.period - 1) + (target - before) / cf.net_flow

    if not cashflows:
        return PAYBACK_UNRECOVERABLE
    last = cashflows[-1]
    if last.net_flow <= 0:
        return PAYBACK_UNRECOVERABLE
    return last.period + (target - cumulative) / last.net_flow


def roi(cashflows: Sequence[CashFlowPeriod], initial_investment: float) -> float:
    """(total net return - investment) / investment, in percent."""
    total = sum(cf.net_flow for cf in cashflows)
    return (total - initial_investment) / initial_investment * 100.0


__all__ = ["npv", "irr", "IRRResult", "PAYBACK_UNRECOVERABLE", "payback_period", "roi"]
