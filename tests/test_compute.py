import pytest

from compute import (calculate_projections, valuation_has_data, valuation_has_results,
                     cumulative_return_series)


def test_scenarios_are_isolated(investors, deal_factory):
    # projected pays the pref every year; valuation leaves it unpaid
    deal = deal_factory(timeline_years=2, projected_annual_return=20.0,
                        actual_annual_returns=[0.0, 0.0])
    proj = calculate_projections(investors, [deal])

    assert proj.projected.allocations[-1].unpaid_pref == pytest.approx(0.0)
    assert proj.valuation.allocations[-1].unpaid_pref == pytest.approx(160_000.0)
    assert proj.projected.summary_metrics.total_lp_distributions == pytest.approx(2 * 147_000.0 + 1_000_000.0)
    assert proj.valuation.summary_metrics.total_lp_distributions == pytest.approx(1_000_000.0)


def test_repeated_runs_give_same_result(investors, deal_factory):
    deals = [deal_factory(timeline_years=3, actual_annual_returns=[2.0, 4.0, 30.0])]
    first = calculate_projections(investors, deals)
    second = calculate_projections(investors, deals)
    assert first.valuation.summary_metrics == second.valuation.summary_metrics
    assert first.projected.summary_metrics == second.projected.summary_metrics


def test_caller_deals_not_mutated(investors, deal_factory):
    deals = [deal_factory(timeline_years=3)]
    before = [d.to_dict() for d in deals]
    calculate_projections(investors, deals)
    assert [d.to_dict() for d in deals] == before


def test_inactive_deals_ignored(investors, deal_factory):
    active = deal_factory(deal_id="a", timeline_years=2)
    inactive = deal_factory(deal_id="b", timeline_years=5, is_active=False)
    proj = calculate_projections(investors, [active, inactive])
    assert len(proj.projected.yearly_breakdown) == 2
    assert len(proj.cumulative_return_chart) == 2
    assert proj.projected.summary_metrics.total_lp_allocated == pytest.approx(1_000_000.0)


def test_cumulative_series_without_actuals(investors, deal_factory):
    deal = deal_factory(timeline_years=3)
    proj = calculate_projections(investors, [deal])
    assert not valuation_has_data([deal])
    assert all(p.valuation is None for p in proj.cumulative_return_chart)
    assert proj.projected.cumulative_return_chart is proj.cumulative_return_chart
    assert proj.valuation.cumulative_return_chart is proj.cumulative_return_chart
    # capital is still returned in the final year
    assert valuation_has_results(proj)


def test_cumulative_series_with_actuals(investors, deal_factory):
    deal = deal_factory(timeline_years=2, actual_annual_returns=[8.0, None])
    proj = calculate_projections(investors, [deal])
    assert valuation_has_data([deal])
    assert valuation_has_results(proj)

    points = proj.cumulative_return_chart
    assert [p.year for p in points] == [1, 2]
    assert points[0].valuation == pytest.approx(80_000.0)
    assert points[1].valuation == pytest.approx(1_080_000.0)
    assert points[1].projected == pytest.approx(
        sum(y.lp_distributions for y in proj.projected.yearly_breakdown)
    )


def test_no_deals(investors):
    proj = calculate_projections(investors, [])
    assert proj.cumulative_return_chart == []
    assert not valuation_has_results(proj)
    assert proj.projected.summary_metrics.overall_lp_moic == 0.0
    assert all(p.irr is None for p in proj.projected.lp_performance)


def test_cumulative_return_series_is_running_sum(investors, deal_factory):
    deal = deal_factory(timeline_years=2, actual_annual_returns=[10.0, 10.0])
    proj = calculate_projections(investors, [deal])
    series = cumulative_return_series(proj.projected, proj.valuation, 3, has_valuation=True)
    assert len(series) == 3
    assert series[2].projected == series[1].projected
    assert series[2].valuation == series[1].valuation
