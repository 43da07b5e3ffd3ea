#!/usr/bin/env python3
"""
Sensitivity sweeps and Monte Carlo simulation around a single request.
Varies inflow / discount rate and collects IRR, NPV, payback and ROI per draw.
"""
from dataclasses import replace
from typing import Optional, Sequence
import warnings

import numpy as np
import pandas as pd

from .core import compute_financial_metrics
from .finance.irr import SolverSettings
from .types import FinancialInputs
from .validate import InvalidInputError

SWEEP_FIELDS = (
    "initial_investment",
    "discount_rate",
    "annual_cash_inflow",
    "annual_cash_outflow",
)


def _row(inputs: FinancialInputs, settings: Optional[SolverSettings]) -> dict:
    m = compute_financial_metrics(inputs, settings)
    return {
        'irr_pct': m.irr,
        'irr_converged': m.irr_converged,
        'npv': m.npv,
        'payback_period': m.payback_period,
        'roi_pct': m.roi,
    }


def sweep_values(base: float, span: float = 0.2, steps: int = 5) -> np.ndarray:
    """Evenly spaced grid from base*(1-span) to base*(1+span)."""
    if steps < 1:
        raise ValueError("steps must be >= 1")
    return base * np.linspace(1.0 - span, 1.0 + span, steps)


def sweep(
    inputs: FinancialInputs,
    field: str,
    values: Sequence[float],
    settings: Optional[SolverSettings] = None,
) -> pd.DataFrame:
    """
    Recompute metrics for each value of one input field, others held fixed.

    Returns:
        DataFrame with one row per value: [field, irr_pct, irr_converged, npv,
        payback_period, roi_pct]
    """
    if field not in SWEEP_FIELDS:
        raise ValueError(f"cannot sweep '{field}'; choose one of {SWEEP_FIELDS}")
    rows = []
    for v in values:
        varied = replace(inputs, **{field: float(v)})
        rows.append({field: float(v), **_row(varied, settings)})
    return pd.DataFrame(rows)


def run_monte_carlo(
    inputs: FinancialInputs,
    iterations: int = 1000,
    seed: Optional[int] = None,
    inflow_spread: float = 0.2,
    rate_spread: float = 0.02,
    settings: Optional[SolverSettings] = None,
) -> pd.DataFrame:
    """
    Run a Monte Carlo simulation over inflow and discount rate.

    Args:
        inputs: Baseline request inputs
        iterations: Number of draws
        seed: Random seed for reproducibility
        inflow_spread: Inflow drawn uniformly in base*(1 ± spread)
        rate_spread: Discount rate drawn uniformly in base ± spread (floored at 0)
        settings: Optional IRR solver overrides

    Returns:
        DataFrame of draws; summary statistics are attached as attributes
    """
    rng = np.random.default_rng(seed)
    inflows = inputs.annual_cash_inflow * rng.uniform(
        1.0 - inflow_spread, 1.0 + inflow_spread, iterations
    )
    rates = np.clip(
        rng.uniform(inputs.discount_rate - rate_spread, inputs.discount_rate + rate_spread, iterations),
        0.0,
        None,
    )

    out_data = []
    failed_count = 0

    for i in range(iterations):
        sample = replace(
            inputs,
            annual_cash_inflow=float(inflows[i]),
            discount_rate=float(rates[i]),
        )
        try:
            out_data.append({
                'iteration': i + 1,
                'annual_cash_inflow': sample.annual_cash_inflow,
                'discount_rate': sample.discount_rate,
                **_row(sample, settings),
            })
        except InvalidInputError as e:
            failed_count += 1
            warnings.warn(f"Draw {i+1} rejected: {e}")
            continue

    if failed_count > 0:
        warnings.warn(f"Monte Carlo: {failed_count}/{iterations} draws rejected")

    df = pd.DataFrame(out_data)

    if len(df) > 0:
        df.attrs['mean_irr'] = df['irr_pct'].mean()
        df.attrs['p10_irr'] = df['irr_pct'].quantile(0.10)
        df.attrs['p90_irr'] = df['irr_pct'].quantile(0.90)
        df.attrs['prob_npv_positive'] = float((df['npv'] > 0).mean())
        df.attrs['success_rate'] = len(df) / iterations

    return df
