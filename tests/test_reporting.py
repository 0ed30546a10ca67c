from io import BytesIO
import math

import pytest
from openpyxl import load_workbook

from compute import calculate_projections
from config import TIER_CATEGORIES
from reporting import (yearly_breakdown_frame, tier_chart_frame, cumulative_return_frame,
                       lp_performance_frame, lp_deal_breakdown_frame, gp_performance_frame,
                       summary_frame, generate_excel_report)


@pytest.fixture
def projections(default_investors, default_deals):
    return calculate_projections(default_investors, default_deals)


def test_yearly_breakdown_total_row(projections):
    df = yearly_breakdown_frame(projections.projected)
    assert df["Year"].tolist() == [1, 2, 3, 4, 5, "Total"]
    body = df.iloc[:-1]
    assert df.iloc[-1]["LP Distributions"] == pytest.approx(body["LP Distributions"].sum())
    assert df["Total Distribution"].tolist() == pytest.approx((df["LP Distributions"] + df["GP Earnings"]).tolist())


def test_yearly_breakdown_without_total(projections):
    df = yearly_breakdown_frame(projections.projected, with_total=False)
    assert len(df) == 5


def test_tier_chart_frame_wide_and_long(projections):
    wide = tier_chart_frame(projections.projected.annual_tier_chart)
    assert list(wide.columns) == ["Year"] + list(TIER_CATEGORIES.values())

    long = tier_chart_frame(projections.projected.cumulative_tier_chart, long=True)
    assert len(long) == 5 * len(TIER_CATEGORIES)
    assert set(long["Tier"]) == set(TIER_CATEGORIES.values())
    assert long.loc[long["Tier"] == "LP Pref", "order"].iloc[0] == 0


def test_cumulative_return_frame_drops_missing_valuation(investors, deal_factory):
    proj = calculate_projections(investors, [deal_factory(timeline_years=2)])
    wide = cumulative_return_frame(proj.cumulative_return_chart)
    assert wide["Valuation"].isna().all()

    long = cumulative_return_frame(proj.cumulative_return_chart, long=True)
    assert set(long["Scenario"]) == {"Projected"}


def test_lp_frames(projections):
    df = lp_performance_frame(projections.valuation)
    assert df["Name"].tolist() == ["Family Office", "Angel Investor"]
    assert df["Allocated"].tolist() == [750_000.0, 250_000.0]
    assert (df["IRR"] > 0).all()

    lp = projections.valuation.lp_performance[0]
    breakdown = lp_deal_breakdown_frame(lp)
    assert breakdown["Deal"].tolist() == ["Commercial Property Alpha", "Total"]
    assert breakdown.iloc[-1]["Distributions"] == pytest.approx(lp.distributions)


def test_lp_frame_undefined_irr_is_nan(investors, deal_factory):
    proj = calculate_projections(investors, [deal_factory()])
    df = lp_performance_frame(proj.projected)
    lp2 = df[df["Investor ID"] == "lp2"].iloc[0]
    assert math.isnan(lp2["IRR"])


def test_gp_frame(projections):
    df = gp_performance_frame(projections.projected)
    assert df["Name"].tolist() == ["Abhi", "Ovi"]
    assert df["Carried Interest"].iloc[0] == pytest.approx(df["Carried Interest"].iloc[1])
    assert (df["Total Earnings"] == df["Mgmt Fees"] + df["Carried Interest"]).all()


def test_summary_frame(projections):
    df = summary_frame(projections.projected)
    moic = df.loc[df["Metric"] == "Overall LP MOIC", "Value"].iloc[0]
    assert moic == pytest.approx(projections.projected.summary_metrics.overall_lp_moic)


def test_excel_report(investors, deal_factory):
    proj = calculate_projections(investors, [deal_factory()])
    data = generate_excel_report(proj)
    assert isinstance(data, bytes)

    wb = load_workbook(BytesIO(data))
    assert wb.sheetnames == [
        "Projected Summary", "Projected Annual", "Projected Tiers", "Projected LPs", "Projected GPs",
        "Valuation Summary", "Valuation Annual", "Valuation Tiers", "Valuation LPs", "Valuation GPs",
        "Cumulative LP Returns",
    ]

    ws = wb["Projected LPs"]
    headers = [c.value for c in ws[1]]
    irr_col = headers.index("IRR") + 1
    rows = {ws.cell(row=r, column=1).value: r for r in range(2, ws.max_row + 1)}
    assert ws.cell(row=rows["lp1"], column=irr_col).value == pytest.approx(0.147, abs=1e-6)
    assert ws.cell(row=rows["lp1"], column=irr_col).number_format == "0.00%"
    # undefined IRR left blank
    assert ws.cell(row=rows["lp2"], column=irr_col).value is None

    annual = wb["Projected Annual"]
    assert annual.cell(row=annual.max_row, column=1).value == "Total"
    assert annual.cell(row=annual.max_row, column=1).font.bold
