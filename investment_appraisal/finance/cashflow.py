from __future__ import annotations

from typing import List

from investment_appraisal.types import CashFlowPeriod, FinancialInputs


def build_cash_flows(inputs: FinancialInputs) -> List[CashFlowPeriod]:
    """
    One row per period 1..project_duration. Inflow is flat; outflow is the
    recurring outflow plus that period's breakdown opex. Breakdown capex is
    reporting-only and never touches the series.
    """
    breakdown = inputs.yearly_breakdown or {}
    rows: List[CashFlowPeriod] = []
    for period in range(1, int(inputs.project_duration) + 1):
        outflow = float(inputs.annual_cash_outflow or 0.0)
        spend = breakdown.get(period)
        if spend is not None:
            outflow += float(spend.opex or 0.0)
        rows.append(
            CashFlowPeriod(
                period=period,
                inflow=float(inputs.annual_cash_inflow),
                outflow=outflow,
            )
        )
    return rows


def cumulative_net(rows: List[CashFlowPeriod]) -> List[float]:
    out: List[float] = []
    total = 0.0
    for r in rows:
        total += r.net_flow
        out.append(total)
    return out
