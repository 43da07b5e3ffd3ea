from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from investment_appraisal.finance.irr import IRRResult


@dataclass(frozen=True)
class CashFlowPeriod:
    period: int
    inflow: float
    outflow: float

    @property
    def net_flow(self) -> float:
        return self.inflow - self.outflow


@dataclass(frozen=True)
class YearlySpend:
    """Planned spend for one period. Only `opex` enters the cash-flow series."""

    capex: float = 0.0
    opex: float = 0.0


@dataclass(frozen=True)
class FinancialInputs:
    initial_investment: float
    discount_rate: float
    project_duration: int
    annual_cash_inflow: float
    annual_cash_outflow: float = 0.0
    yearly_breakdown: Optional[Mapping[int, YearlySpend]] = None


@dataclass(frozen=True)
class FinancialMetrics:
    irr: float  # percent
    npv: float
    payback_period: float  # math.inf when never recovered
    roi: float  # percent
    irr_solution: IRRResult
    payback_within_horizon: bool = field(default=False)

    @property
    def irr_converged(self) -> bool:
        return self.irr_solution.converged

    @property
    def payback_recoverable(self) -> bool:
        return math.isfinite(self.payback_period)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe mapping; an unrecoverable payback is reported as None."""
        return {
            "irr_pct": self.irr,
            "npv": self.npv,
            "payback_period": self.payback_period if self.payback_recoverable else None,
            "payback_within_horizon": self.payback_within_horizon,
            "roi_pct": self.roi,
            "irr_converged": self.irr_solution.converged,
            "irr_iterations": self.irr_solution.iterations,
            "irr_status": self.irr_solution.status,
        }
