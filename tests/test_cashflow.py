from investment_appraisal.finance.cashflow import build_cash_flows, cumulative_net
from investment_appraisal.types import FinancialInputs, YearlySpend


def _inputs(**kw):
    base = dict(
        initial_investment=1000.0,
        discount_rate=0.10,
        project_duration=4,
        annual_cash_inflow=400.0,
        annual_cash_outflow=50.0,
    )
    base.update(kw)
    return FinancialInputs(**base)


def test_one_row_per_period_with_flat_inflow():
    rows = build_cash_flows(_inputs())
    assert [r.period for r in rows] == [1, 2, 3, 4]
    assert all(r.inflow == 400.0 for r in rows)
    assert all(r.outflow == 50.0 for r in rows)
    assert all(r.net_flow == 350.0 for r in rows)


def test_breakdown_opex_adds_to_period_outflow():
    rows = build_cash_flows(_inputs(yearly_breakdown={2: YearlySpend(opex=100.0)}))
    assert [r.outflow for r in rows] == [50.0, 150.0, 50.0, 50.0]
    assert rows[1].net_flow == 250.0


def test_breakdown_capex_only_leaves_series_unchanged():
    plain = build_cash_flows(_inputs())
    with_capex = build_cash_flows(_inputs(yearly_breakdown={1: YearlySpend(capex=900.0)}))
    assert with_capex == plain


def test_breakdown_outside_horizon_is_ignored():
    rows = build_cash_flows(_inputs(yearly_breakdown={9: YearlySpend(opex=100.0)}))
    assert len(rows) == 4
    assert all(r.outflow == 50.0 for r in rows)


def test_outflow_defaults_to_zero():
    rows = build_cash_flows(
        FinancialInputs(initial_investment=10.0, discount_rate=0.0, project_duration=2, annual_cash_inflow=5.0)
    )
    assert [r.net_flow for r in rows] == [5.0, 5.0]


def test_cumulative_net():
    assert cumulative_net(build_cash_flows(_inputs())) == [350.0, 700.0, 1050.0, 1400.0]
