"""Capital-budgeting metrics for investment requests: NPV, IRR, payback, ROI."""
from .core import compute_financial_metrics
from .types import CashFlowPeriod, FinancialInputs, FinancialMetrics, YearlySpend
from .validate import InvalidInputError

__all__ = [
    "compute_financial_metrics",
    "CashFlowPeriod",
    "FinancialInputs",
    "FinancialMetrics",
    "YearlySpend",
    "InvalidInputError",
]
