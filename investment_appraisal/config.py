from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict
import os
import io
import yaml

from .finance.irr import SolverSettings
from .heuristics import HeuristicTable


@dataclass(frozen=True)
class Settings:
    solver: SolverSettings = field(default_factory=SolverSettings)
    heuristics: HeuristicTable = field(default_factory=HeuristicTable)


DEFAULT_SETTINGS = Settings()


def _section(cfg: Dict[str, Any], name: str, cls) -> Dict[str, Any]:
    raw = cfg.get(name) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"settings section '{name}' must be a mapping")
    allowed = {f.name for f in fields(cls)}
    unknown = sorted(k for k in raw if k not in allowed)
    if unknown:
        raise ValueError(f"unknown keys in settings section '{name}': {unknown}")
    return dict(raw)


def _solver_from(raw: Dict[str, Any]) -> SolverSettings:
    casts = {"max_iterations": int}
    kwargs = {k: casts.get(k, float)(v) for k, v in raw.items()}
    return SolverSettings(**kwargs)


def _heuristics_from(raw: Dict[str, Any]) -> HeuristicTable:
    kwargs: Dict[str, Any] = {}
    for k, v in raw.items():
        if k in ("rate_adjustments", "inflow_multipliers"):
            # YAML mappings keep file order, which sets inflow precedence
            kwargs[k] = {str(tag): float(x) for tag, x in (v or {}).items()}
        elif k == "tag_aliases":
            kwargs[k] = {str(alias): str(tag) for alias, tag in (v or {}).items()}
        elif k == "rate_bounds":
            lo, hi = v
            kwargs[k] = (float(lo), float(hi))
        elif k == "long_project_years":
            kwargs[k] = int(v)
        else:
            kwargs[k] = float(v)
    return HeuristicTable(**kwargs)


def load_settings(source: str | os.PathLike | io.StringIO) -> Settings:
    """
    Load solver/heuristic overrides from a YAML path or text stream.

        solver:     {initial_guess, tolerance, max_iterations, lower_bound, upper_bound}
        heuristics: {base_rate, rate_bounds, rate_adjustments, ...}

    Missing sections fall back to the defaults.
    """
    text: str
    if hasattr(source, "read"):
        text = str(source.read())
    else:
        p = os.fspath(source)
        with open(p, "r", encoding="utf-8") as f:
            text = f.read()

    cfg = yaml.safe_load(text) or {}
    if not isinstance(cfg, dict):
        raise ValueError("settings file must contain a mapping")
    unknown = sorted(k for k in cfg if k not in ("solver", "heuristics"))
    if unknown:
        raise ValueError(f"unknown settings sections: {unknown}")

    return Settings(
        solver=_solver_from(_section(cfg, "solver", SolverSettings)),
        heuristics=_heuristics_from(_section(cfg, "heuristics", HeuristicTable)),
    )
