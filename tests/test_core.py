import json
import math

import pytest

from investment_appraisal import (
    FinancialInputs,
    InvalidInputError,
    YearlySpend,
    compute_financial_metrics,
)
from investment_appraisal.finance.irr import FLAT_DERIVATIVE, SolverSettings
from investment_appraisal.validate import validate_inputs

REFERENCE = FinancialInputs(
    initial_investment=500000.0,
    discount_rate=0.10,
    project_duration=10,
    annual_cash_inflow=75000.0,
)


def _with(**kw):
    base = dict(
        initial_investment=REFERENCE.initial_investment,
        discount_rate=REFERENCE.discount_rate,
        project_duration=REFERENCE.project_duration,
        annual_cash_inflow=REFERENCE.annual_cash_inflow,
    )
    base.update(kw)
    return FinancialInputs(**base)


def test_reference_scenario():
    m = compute_financial_metrics(REFERENCE)
    assert m.irr == pytest.approx(8.14, abs=0.01)
    assert m.npv == pytest.approx(-39157.47, abs=0.01)
    assert m.payback_period == pytest.approx(6.67, abs=0.01)
    assert m.roi == pytest.approx(50.0)
    assert m.irr_converged
    assert m.payback_within_horizon


def test_high_discount_rate_gives_negative_npv():
    m = compute_financial_metrics(_with(initial_investment=100000.0, discount_rate=0.5,
                                        project_duration=5, annual_cash_inflow=20000.0))
    assert m.npv < 0


def test_zero_discount_rate_npv_is_undiscounted_return():
    m = compute_financial_metrics(_with(discount_rate=0.0))
    assert m.npv == pytest.approx(250000.0)


def test_repeated_evaluation_is_identical():
    a = compute_financial_metrics(REFERENCE)
    b = compute_financial_metrics(REFERENCE)
    assert a == b
    assert a.to_dict() == b.to_dict()


@pytest.mark.parametrize(
    "field, value",
    [
        ("initial_investment", 0.0),
        ("initial_investment", -10.0),
        ("discount_rate", -0.05),
        ("project_duration", 0),
        ("project_duration", 2.5),
        ("annual_cash_inflow", 0.0),
        ("annual_cash_outflow", -1.0),
        ("initial_investment", math.inf),
        ("initial_investment", math.nan),
        ("discount_rate", math.inf),
        ("project_duration", math.inf),
        ("annual_cash_inflow", -math.inf),
    ],
)
def test_invalid_inputs_are_rejected_with_field_name(field, value):
    with pytest.raises(InvalidInputError) as ei:
        compute_financial_metrics(_with(**{field: value}))
    assert field in ei.value.fields
    assert field in str(ei.value)


def test_all_violations_reported_together():
    bad = _with(initial_investment=0.0, project_duration=0)
    errors = validate_inputs(bad)
    assert len(errors) == 2
    with pytest.raises(InvalidInputError) as ei:
        compute_financial_metrics(bad)
    assert ei.value.fields == ["initial_investment", "project_duration"]


def test_negative_breakdown_spend_rejected():
    with pytest.raises(InvalidInputError) as ei:
        compute_financial_metrics(_with(yearly_breakdown={1: YearlySpend(opex=-5.0)}))
    assert ei.value.fields == ["yearly_breakdown"]



def test_non_finite_breakdown_spend_rejected():
    with pytest.raises(InvalidInputError) as ei:
        compute_financial_metrics(_with(yearly_breakdown={1: YearlySpend(capex=math.inf)}))
    assert ei.value.fields == ["yearly_breakdown"]

def test_valid_inputs_have_no_errors():
    assert validate_inputs(REFERENCE) == []


def test_capex_only_breakdown_does_not_change_metrics():
    plain = compute_financial_metrics(REFERENCE)
    capex = compute_financial_metrics(_with(yearly_breakdown={3: YearlySpend(capex=250000.0)}))
    assert capex == plain


def test_breakdown_opex_lowers_npv():
    plain = compute_financial_metrics(REFERENCE)
    opex = compute_financial_metrics(_with(yearly_breakdown={1: YearlySpend(opex=10000.0)}))
    assert opex.npv == pytest.approx(plain.npv - 10000.0 / 1.1)
    assert opex.roi == pytest.approx(48.0)


def test_unrecoverable_project_uses_sentinels():
    m = compute_financial_metrics(_with(annual_cash_inflow=100.0, annual_cash_outflow=100.0))
    assert math.isinf(m.payback_period)
    assert not m.payback_recoverable
    assert not m.payback_within_horizon
    assert not m.irr_converged
    assert m.irr_solution.status == FLAT_DERIVATIVE
    d = m.to_dict()
    assert d["payback_period"] is None
    assert d["irr_converged"] is False


def test_payback_beyond_horizon_flagged():
    m = compute_financial_metrics(_with(annual_cash_inflow=40000.0))
    assert m.payback_period == pytest.approx(12.5)
    assert not m.payback_within_horizon


def test_solver_settings_pass_through():
    m = compute_financial_metrics(REFERENCE, SolverSettings(max_iterations=1))
    assert not m.irr_converged
    assert m.irr_solution.iterations == 1


def test_long_horizon_result_is_serializable():
    m = compute_financial_metrics(_with(initial_investment=1000.0, project_duration=1000,
                                        annual_cash_inflow=1100.0))
    assert m.irr_converged
    assert m.irr == pytest.approx(110.0, abs=0.01)
    # strict JSON: no NaN/Infinity in stored results
    json.dumps(m.to_dict(), allow_nan=False)
