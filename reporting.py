"""
reporting.py
Tabular views of calculation results and the Excel report
"""

from io import BytesIO
from typing import List

import pandas as pd

from config import TIER_CATEGORIES, SCENARIOS
from models import (CalculationOutput, Projections, AnnualTierRow, LPPerformance,
                    CumulativeReturnPoint)


# ============================================================
# DATAFRAME VIEWS
# ============================================================

def yearly_breakdown_frame(output: CalculationOutput, with_total: bool = True) -> pd.DataFrame:
    """
    Annual summary: gross return, LP distributions, GP earnings, total

    Returns DataFrame with one row per year plus an optional Total row
    """
    cols = ["Year", "Gross Return", "LP Distributions", "GP Earnings", "Total Distribution"]
    df = pd.DataFrame(
        [
            {
                "Year": y.year,
                "Gross Return": y.gross_return,
                "LP Distributions": y.lp_distributions,
                "GP Earnings": y.gp_earnings,
                "Total Distribution": y.total_distribution,
            }
            for y in output.yearly_breakdown
        ],
        columns=cols,
    )
    if with_total:
        totals = df[cols[1:]].sum()
        total_row = pd.DataFrame([{"Year": "Total", **totals.to_dict()}])
        df = pd.concat([df.astype({"Year": object}), total_row], ignore_index=True)
    return df


def tier_chart_frame(rows: List[AnnualTierRow], long: bool = False) -> pd.DataFrame:
    """
    Tier chart series as a DataFrame

    Args:
        rows: annual_tier_chart or cumulative_tier_chart
        long: If True, melt to (Year, Tier, Amount, order) for stacked charts
    """
    wide = pd.DataFrame([r.to_dict() for r in rows],
                        columns=["year"] + list(TIER_CATEGORIES.keys()))
    wide = wide.rename(columns={"year": "Year", **TIER_CATEGORIES})
    if not long:
        return wide

    out = wide.melt(id_vars="Year", var_name="Tier", value_name="Amount")
    order = {label: i for i, label in enumerate(TIER_CATEGORIES.values())}
    out["order"] = out["Tier"].map(order)
    return out


def cumulative_return_frame(points: List[CumulativeReturnPoint], long: bool = False) -> pd.DataFrame:
    """
    Cumulative LP distributions, projected vs. valuation

    Valuation stays NaN when no actual returns were modeled. In long form
    those rows are dropped so charts show only the projected line.
    """
    wide = pd.DataFrame(
        [
            {
                "Year": p.year,
                "Projected": p.projected,
                "Valuation": float("nan") if p.valuation is None else p.valuation,
            }
            for p in points
        ],
        columns=["Year", "Projected", "Valuation"],
    )
    if not long:
        return wide
    out = wide.melt(id_vars="Year", var_name="Scenario", value_name="Cumulative LP Distributions")
    return out.dropna(subset=["Cumulative LP Distributions"]).reset_index(drop=True)


def lp_performance_frame(output: CalculationOutput) -> pd.DataFrame:
    """LP table: allocated, distributions, MOIC, IRR (NaN when undefined)"""
    return pd.DataFrame(
        [
            {
                "Investor ID": p.investor_id,
                "Name": p.name,
                "Allocated": p.allocated,
                "Distributions": p.distributions,
                "MOIC": p.moic,
                "IRR": float("nan") if p.irr is None else p.irr,
            }
            for p in output.lp_performance
        ],
        columns=["Investor ID", "Name", "Allocated", "Distributions", "MOIC", "IRR"],
    )


def lp_deal_breakdown_frame(lp: LPPerformance, with_total: bool = True) -> pd.DataFrame:
    """Per-deal investment/distribution drill-down for one LP"""
    df = pd.DataFrame(
        [
            {"Deal": d.deal_name, "Investment": d.investment, "Distributions": d.distribution}
            for d in lp.deal_breakdown
        ],
        columns=["Deal", "Investment", "Distributions"],
    )
    if with_total:
        df = pd.concat([df, pd.DataFrame([{
            "Deal": "Total",
            "Investment": df["Investment"].sum(),
            "Distributions": df["Distributions"].sum(),
        }])], ignore_index=True)
    return df


def gp_performance_frame(output: CalculationOutput) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Investor ID": p.investor_id,
                "Name": p.name,
                "Mgmt Fees": p.management_fees,
                "Carried Interest": p.carried_interest,
                "Total Earnings": p.total_earnings,
            }
            for p in output.gp_performance
        ],
        columns=["Investor ID", "Name", "Mgmt Fees", "Carried Interest", "Total Earnings"],
    )


def summary_frame(output: CalculationOutput) -> pd.DataFrame:
    s = output.summary_metrics
    return pd.DataFrame([
        {"Metric": "Total LP Allocated", "Value": s.total_lp_allocated},
        {"Metric": "Total LP Distributions", "Value": s.total_lp_distributions},
        {"Metric": "Total GP Earnings", "Value": s.total_gp_earnings},
        {"Metric": "Total GP Mgmt Fees", "Value": s.total_gp_management_fees},
        {"Metric": "Total GP Carried Interest", "Value": s.total_gp_carried_interest},
        {"Metric": "Overall LP MOIC", "Value": s.overall_lp_moic},
    ])


# ============================================================
# EXCEL REPORT
# ============================================================

CURRENCY_COLS = {
    "Value", "Gross Return", "LP Distributions", "GP Earnings", "Total Distribution",
    "Allocated", "Distributions", "Mgmt Fees", "Carried Interest", "Total Earnings",
    "Projected", "Valuation", *TIER_CATEGORIES.values(),
}
PCT_COLS = {"IRR"}
MOIC_COLS = {"MOIC"}


def _write_sheet(wb, title: str, df: pd.DataFrame):
    """Write a DataFrame to a new sheet with header styling and number formats"""
    from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

    ws = wb.create_sheet(title=title[:31])

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")

    cols = list(df.columns)
    for col_idx, col_name in enumerate(cols, start=1):
        cell = ws.cell(row=1, column=col_idx, value=col_name)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")

    bold_font = Font(bold=True)
    top_border = Border(top=Side(style="medium"))

    for row_idx, row in enumerate(df.itertuples(index=False), start=2):
        is_total = any(str(v) == "Total" for v in row[:2])
        for col_idx, (col_name, val) in enumerate(zip(cols, row), start=1):
            cell = ws.cell(row=row_idx, column=col_idx)
            if col_name in CURRENCY_COLS:
                cell.value = float(val) if pd.notna(val) else None
                cell.number_format = '$#,##0'
            elif col_name in PCT_COLS:
                cell.value = float(val) if pd.notna(val) else None
                cell.number_format = '0.00%'
            elif col_name in MOIC_COLS:
                cell.value = float(val) if pd.notna(val) else 0.0
                cell.number_format = '0.00"x"'
            else:
                cell.value = val
            if is_total:
                cell.font = bold_font
                cell.border = top_border

    # Overall LP MOIC sits in the currency-formatted Value column
    if title.endswith("Summary"):
        for row_idx in range(2, len(df) + 2):
            if ws.cell(row=row_idx, column=1).value == "Overall LP MOIC":
                ws.cell(row=row_idx, column=2).number_format = '0.00"x"'

    for col_idx, col_name in enumerate(cols, start=1):
        max_len = len(str(col_name))
        for row_idx in range(2, len(df) + 2):
            v = ws.cell(row=row_idx, column=col_idx).value
            if v is not None:
                max_len = max(max_len, len(str(v)))
        ws.column_dimensions[ws.cell(row=1, column=col_idx).column_letter].width = min(max_len + 4, 30)

    return ws


def generate_excel_report(projections: Projections) -> bytes:
    """
    Workbook with summary, annual, tier, LP and GP sheets for each scenario
    plus the cumulative comparison.

    Returns:
        Bytes suitable for st.download_button.
    """
    from openpyxl import Workbook

    wb = Workbook()
    wb.remove(wb.active)

    for key, label in SCENARIOS.items():
        output: CalculationOutput = getattr(projections, key)
        _write_sheet(wb, f"{label} Summary", summary_frame(output))
        _write_sheet(wb, f"{label} Annual", yearly_breakdown_frame(output))
        _write_sheet(wb, f"{label} Tiers", tier_chart_frame(output.annual_tier_chart))
        _write_sheet(wb, f"{label} LPs", lp_performance_frame(output))
        _write_sheet(wb, f"{label} GPs", gp_performance_frame(output))

    _write_sheet(wb, "Cumulative LP Returns", cumulative_return_frame(projections.cumulative_return_chart))

    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()
