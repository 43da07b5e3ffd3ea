import pytest

from investment_appraisal.sensitivity import run_monte_carlo, sweep, sweep_values
from investment_appraisal.types import FinancialInputs

BASE = FinancialInputs(
    initial_investment=500000.0,
    discount_rate=0.10,
    project_duration=10,
    annual_cash_inflow=75000.0,
)


def test_sweep_values_grid():
    assert list(sweep_values(100.0, 0.2, 5)) == pytest.approx([80.0, 90.0, 100.0, 110.0, 120.0])
    with pytest.raises(ValueError):
        sweep_values(100.0, 0.2, 0)


def test_inflow_sweep_properties():
    df = sweep(BASE, "annual_cash_inflow", sweep_values(75000.0, 0.4, 5))
    assert len(df) == 5
    paybacks = list(df["payback_period"])
    assert all(a >= b for a, b in zip(paybacks, paybacks[1:]))
    rois = list(df["roi_pct"])
    steps = [b - a for a, b in zip(rois, rois[1:])]
    assert steps == pytest.approx([steps[0]] * 4)
    assert df["irr_pct"].is_monotonic_increasing


def test_discount_rate_sweep_leaves_irr_unchanged():
    df = sweep(BASE, "discount_rate", [0.05, 0.10, 0.15])
    assert df["irr_pct"].nunique() == 1
    assert df["npv"].is_monotonic_decreasing


def test_sweep_rejects_unknown_field():
    with pytest.raises(ValueError):
        sweep(BASE, "project_title", [1.0])


def test_monte_carlo_reproducible_with_seed():
    a = run_monte_carlo(BASE, iterations=50, seed=7)
    b = run_monte_carlo(BASE, iterations=50, seed=7)
    assert a.equals(b)
    assert len(a) == 50
    for key in ("mean_irr", "p10_irr", "p90_irr", "prob_npv_positive", "success_rate"):
        assert key in a.attrs
    assert a.attrs["success_rate"] == 1.0
    assert a.attrs["p10_irr"] <= a.attrs["p90_irr"]
    assert (a["discount_rate"] >= 0.0).all()


def test_monte_carlo_skips_rejected_draws():
    with pytest.warns(UserWarning):
        df = run_monte_carlo(BASE, iterations=200, seed=3, inflow_spread=1.5)
    assert 0 < len(df) < 200
    assert df.attrs["success_rate"] < 1.0
