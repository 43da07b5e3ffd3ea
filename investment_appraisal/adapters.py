# investment_appraisal/adapters.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from investment_appraisal.config import DEFAULT_SETTINGS, Settings
from investment_appraisal.core import compute_financial_metrics
from investment_appraisal.finance.cashflow import build_cash_flows, cumulative_net
from investment_appraisal.heuristics import default_discount_rate, estimate_annual_cash_inflow
from investment_appraisal.types import FinancialInputs, YearlySpend
from investment_appraisal.validate import InvalidInputError

logger = logging.getLogger(__name__)

PROVIDED = "provided"
HEURISTIC = "heuristic"
DERIVED = "derived"


# ------------------------------
# Small helpers (no policy here)
# ------------------------------
def _get(d: Dict[str, Any], path: Iterable[str], default: Any = None) -> Any:
    """Safe nested get: _get(req, ['yearly_breakdown', '2025', 'opex'])."""
    cur: Any = d
    for k in path:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def _as_float(
    v: Any, name: str, default: Optional[float] = None, field: Optional[str] = None
) -> Optional[float]:
    if v is None or v == "":
        return default
    try:
        return float(v)
    except (TypeError, ValueError):
        raise InvalidInputError([f"{name} must be a number, got {v!r}"], [field or name]) from None


def _as_int(v: Any, name: str, field: Optional[str] = None) -> Optional[int]:
    # whole numbers only; 2.5 periods or year 2025.7 is rejected, not truncated
    x = _as_float(v, name, field=field)
    if x is None:
        return None
    if not x.is_integer():
        raise InvalidInputError([f"{name} must be a whole number, got {v!r}"], [field or name])
    return int(x)


def _tags(req: Dict[str, Any]) -> List[str]:
    raw = req.get("business_case_type") or []
    if isinstance(raw, str):
        return [raw]
    return [str(t) for t in raw]


def _duration(req: Dict[str, Any]) -> int:
    explicit = _as_int(req.get("project_duration"), "project_duration")
    if explicit is not None:
        return explicit
    start = _as_int(req.get("start_year"), "start_year")
    end = _as_int(req.get("end_year"), "end_year")
    if start is None or end is None:
        raise InvalidInputError(
            ["project_duration or start_year/end_year is required"], ["project_duration"]
        )
    return end - start + 1


def _breakdown(req: Dict[str, Any], duration: int) -> Dict[int, YearlySpend]:
    """
    Breakdown keys are calendar years when start_year is known, else periods.
    Entries outside the modelled window are dropped.
    """
    raw = req.get("yearly_breakdown") or {}
    if not isinstance(raw, Mapping):
        raise InvalidInputError(
            ["yearly_breakdown must be a mapping of year to {capex, opex}"], ["yearly_breakdown"]
        )
    start = _as_int(req.get("start_year"), "start_year")
    out: Dict[int, YearlySpend] = {}
    for key, spend in raw.items():
        year = _as_int(key, f"yearly_breakdown key {key!r}", "yearly_breakdown")
        if year is None:
            raise InvalidInputError(["yearly_breakdown keys must be years"], ["yearly_breakdown"])
        if spend is not None and not isinstance(spend, Mapping):
            raise InvalidInputError(
                [f"yearly_breakdown[{key}] must be a mapping with capex/opex, got {spend!r}"],
                ["yearly_breakdown"],
            )
        spend = spend or {}
        period = year - start + 1 if start is not None else year
        if not 1 <= period <= duration:
            logger.warning("yearly_breakdown entry %s is outside the project window; ignored", key)
            continue
        out[period] = YearlySpend(
            capex=_as_float(
                _get(spend, ["capex"]), f"yearly_breakdown[{key}].capex", 0.0, field="yearly_breakdown"
            ),
            opex=_as_float(
                _get(spend, ["opex"]), f"yearly_breakdown[{key}].opex", 0.0, field="yearly_breakdown"
            ),
        )
    return out


# ------------------------------
# Public adapter(s)
# ------------------------------
def inputs_from_request(
    req: Dict[str, Any], settings: Settings = DEFAULT_SETTINGS
) -> Tuple[FinancialInputs, Dict[str, Any]]:
    """
    Map a submission payload onto FinancialInputs.

    The investment defaults to capex + opex (the total requested spend).
    Missing discount rate / annual inflow come from the heuristic table.
    Returns (inputs, assumptions) where assumptions records where each value
    came from.
    """
    tags = _tags(req)
    duration = _duration(req)
    table = settings.heuristics
    assumptions: Dict[str, Any] = {"business_case_type": tags}

    investment = _as_float(req.get("initial_investment"), "initial_investment")
    if investment is None:
        capex = _as_float(req.get("capex"), "capex", 0.0)
        opex = _as_float(req.get("opex"), "opex", 0.0)
        investment = capex + opex
        assumptions["initial_investment"] = DERIVED
    else:
        assumptions["initial_investment"] = PROVIDED

    rate = _as_float(req.get("discount_rate"), "discount_rate")
    if rate is None:
        rate = default_discount_rate(tags, table)
        assumptions["discount_rate"] = HEURISTIC
    else:
        assumptions["discount_rate"] = PROVIDED

    inflow = _as_float(req.get("annual_cash_inflow"), "annual_cash_inflow")
    if inflow is None:
        inflow = estimate_annual_cash_inflow(investment, tags, duration, table)
        assumptions["annual_cash_inflow"] = HEURISTIC
    else:
        assumptions["annual_cash_inflow"] = PROVIDED

    inputs = FinancialInputs(
        initial_investment=investment,
        discount_rate=rate,
        project_duration=duration,
        annual_cash_inflow=inflow,
        annual_cash_outflow=_as_float(req.get("annual_cash_outflow"), "annual_cash_outflow", 0.0),
        yearly_breakdown=_breakdown(req, duration) or None,
    )
    return inputs, assumptions


def annual_rows(inputs: FinancialInputs, start_year: Optional[int] = None) -> List[Dict[str, Any]]:
    rows = build_cash_flows(inputs)
    cum = cumulative_net(rows)
    breakdown = inputs.yearly_breakdown or {}
    out: List[Dict[str, Any]] = []
    for r, c in zip(rows, cum):
        spend = breakdown.get(r.period)
        out.append({
            "period": r.period,
            "year": (start_year + r.period - 1) if start_year is not None else None,
            "inflow": r.inflow,
            "outflow": r.outflow,
            "capex": spend.capex if spend is not None else 0.0,
            "net_flow": r.net_flow,
            "cumulative_net": c,
            "discounted_net": r.net_flow / ((1.0 + inputs.discount_rate) ** r.period),
        })
    return out


def run_metrics(req: Dict[str, Any], settings: Settings = DEFAULT_SETTINGS) -> Dict[str, Any]:
    """
    High-level adapter used by the scenario runner and CLI:
      1) map the payload to FinancialInputs (filling heuristic defaults),
      2) compute metrics,
      3) return a flat summary plus per-period rows.
    """
    inputs, assumptions = inputs_from_request(req, settings)
    metrics = compute_financial_metrics(inputs, settings.solver)
    if not metrics.irr_converged:
        logger.warning(
            "IRR did not converge (%s after %d iterations); %.4f%% is a low-confidence estimate",
            metrics.irr_solution.status, metrics.irr_solution.iterations, metrics.irr,
        )

    start = _as_int(req.get("start_year"), "start_year")
    summary: Dict[str, Any] = {
        "project_title": req.get("project_title"),
        **metrics.to_dict(),
        "initial_investment": inputs.initial_investment,
        "discount_rate": inputs.discount_rate,
        "project_duration": inputs.project_duration,
        "annual_cash_inflow": inputs.annual_cash_inflow,
        "annual_cash_outflow": inputs.annual_cash_outflow,
        "assumptions": assumptions,
        "annual": annual_rows(inputs, start),
    }
    return summary
