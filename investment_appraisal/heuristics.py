"""
Default assumptions keyed by business case type.

Used only when a submission omits its discount rate or expected inflow. The
numbers live in a HeuristicTable so callers and tests can inject their own
(e.g. loaded from the settings YAML) without touching the solver.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Set, Tuple, Union

ESG = "ESG"
COST_CONTROL = "Cost Control"
IPO_PREPARATION = "IPO Preparation"
IPO_PREP = "IPO Prep"  # label used by older submissions

Pairs = Tuple[Tuple[str, Any], ...]


def _pairs(value: Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]) -> Pairs:
    items = value.items() if isinstance(value, Mapping) else value
    return tuple((str(k), v) for k, v in items)


@dataclass(frozen=True)
class HeuristicTable:
    """
    Attributes:
      base_rate: discount rate before tag adjustments
      rate_bounds: (min, max) clamp applied after stacking adjustments
      rate_adjustments: (tag, additive rate adjustment) pairs; all matching tags stack
      base_inflow_multiplier: annual inflow as a share of total investment
      inflow_multipliers: (tag, replacement multiplier) pairs; only the first
        match in table order applies
      long_project_years: durations above this get long_project_factor
      long_project_factor: haircut for long projects
      tag_aliases: (alias, tag) pairs; an alias and its tag count as one tag

    Mapping arguments are accepted and stored as ordered tuples of pairs, so
    a table is immutable and hashable.
    """
    base_rate: float = 0.10
    rate_bounds: Tuple[float, float] = (0.05, 0.25)
    rate_adjustments: Pairs = (
        (ESG, 0.02),
        (IPO_PREPARATION, 0.03),
        (COST_CONTROL, -0.01),
    )
    base_inflow_multiplier: float = 0.15
    inflow_multipliers: Pairs = (
        (COST_CONTROL, 0.20),
        (ESG, 0.12),
        (IPO_PREPARATION, 0.18),
    )
    long_project_years: int = 5
    long_project_factor: float = 0.9
    tag_aliases: Pairs = ((IPO_PREP, IPO_PREPARATION),)

    def __post_init__(self) -> None:
        for name in ("rate_adjustments", "inflow_multipliers", "tag_aliases"):
            object.__setattr__(self, name, _pairs(getattr(self, name)))
        object.__setattr__(self, "rate_bounds", tuple(self.rate_bounds))


DEFAULT_TABLE = HeuristicTable()


def _canonical(tags: Union[str, Iterable[str], None], table: HeuristicTable) -> Set[str]:
    if isinstance(tags, str):
        tags = [tags]
    aliases = dict(table.tag_aliases)
    seen = set()
    for t in tags or []:
        if t is None:
            continue
        name = str(t).strip()
        seen.add(aliases.get(name, name))
    return seen


def default_discount_rate(
    business_case_types: Union[str, Iterable[str]], table: HeuristicTable = DEFAULT_TABLE
) -> float:
    tags = _canonical(business_case_types, table)
    rate = table.base_rate
    for tag, adj in table.rate_adjustments:
        if tag in tags:
            rate += adj
    lo, hi = table.rate_bounds
    return max(lo, min(hi, rate))


def estimate_annual_cash_inflow(
    total_investment: float,
    business_case_types: Union[str, Iterable[str]],
    project_duration: int,
    table: HeuristicTable = DEFAULT_TABLE,
) -> float:
    tags = _canonical(business_case_types, table)
    multiplier = table.base_inflow_multiplier
    for tag, m in table.inflow_multipliers:
        if tag in tags:
            multiplier = m
            break
    annual = float(total_investment) * multiplier
    if project_duration > table.long_project_years:
        annual *= table.long_project_factor
    return max(0.0, annual)
