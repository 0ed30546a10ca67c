"""
results_ui.py
Results view: summary cards, tier charts, LP/GP performance tables and export
"""

import altair as alt
import pandas as pd
import streamlit as st

from config import SCENARIOS, TIER_CATEGORIES, TIER_COLORS, CLR_PROJECTED, CLR_VALUATION
from compute import valuation_has_results
from models import CalculationOutput, Projections
from reporting import (yearly_breakdown_frame, tier_chart_frame, cumulative_return_frame,
                       lp_performance_frame, lp_deal_breakdown_frame, gp_performance_frame,
                       generate_excel_report)
from utils import fmt_currency, fmt_pct, fmt_multiple


def render_results(projections: Projections):
    st.header("Results")

    # Valuation toggle only when actual returns produced anything
    scenario = "projected"
    if valuation_has_results(projections):
        label = st.radio("Scenario", options=list(SCENARIOS.values()), horizontal=True, key="_scenario")
        scenario = next(k for k, v in SCENARIOS.items() if v == label)
    output: CalculationOutput = getattr(projections, scenario)

    _render_summary_cards(output)

    tab_tiers, tab_lp, tab_gp, tab_annual = st.tabs(
        ["Distributions", "LP Performance", "GP Performance", "Annual Summary"]
    )
    with tab_tiers:
        _render_tier_charts(output)
        _render_cumulative_returns(projections)
    with tab_lp:
        _render_lp_table(output)
    with tab_gp:
        _render_gp_table(output)
    with tab_annual:
        _render_annual_table(output)

    st.download_button(
        label="Download Excel Report",
        data=generate_excel_report(projections),
        file_name="waterfall_report.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        key="_excel_download",
    )


# ============================================================
# SUMMARY CARDS
# ============================================================

def _render_summary_cards(output: CalculationOutput):
    s = output.summary_metrics
    cols = st.columns(4)
    with cols[0]:
        st.metric("LP Distributions", fmt_currency(s.total_lp_distributions))
        st.caption(f"on {fmt_currency(s.total_lp_allocated)} allocated")
    with cols[1]:
        st.metric("LP MOIC", fmt_multiple(s.overall_lp_moic))
    with cols[2]:
        st.metric("GP Earnings", fmt_currency(s.total_gp_earnings))
    with cols[3]:
        st.metric("GP Carry / Fees", fmt_currency(s.total_gp_carried_interest))
        st.caption(f"+ {fmt_currency(s.total_gp_management_fees)} management fees")


# ============================================================
# CHARTS
# ============================================================

def _tier_color_scale():
    return alt.Scale(domain=list(TIER_CATEGORIES.values()), range=[TIER_COLORS[k] for k in TIER_CATEGORIES])


def _render_tier_charts(output: CalculationOutput):
    view = st.radio("View", ["Annual", "Cumulative"], horizontal=True, key="_tier_view")
    rows = output.annual_tier_chart if view == "Annual" else output.cumulative_tier_chart
    if not rows:
        st.info("No active deals with allocated capital.")
        return

    df = tier_chart_frame(rows, long=True)
    chart = alt.Chart(df).mark_bar().encode(
        x=alt.X('Year:O', title='Year'),
        y=alt.Y('Amount:Q', title='Amount ($)', stack='zero', axis=alt.Axis(format='$,.0f')),
        color=alt.Color('Tier:N', scale=_tier_color_scale(),
                        legend=alt.Legend(title=None, orient='bottom', direction='horizontal')),
        order=alt.Order('order:Q'),
        tooltip=['Year', 'Tier', alt.Tooltip('Amount:Q', format='$,.0f')],
    ).properties(height=350)
    st.altair_chart(chart, use_container_width=True)

    with st.expander("Show Data"):
        st.dataframe(tier_chart_frame(rows), use_container_width=True, hide_index=True)


def _render_cumulative_returns(projections: Projections):
    st.markdown("**Cumulative LP Distributions**")
    df = cumulative_return_frame(projections.cumulative_return_chart, long=True)
    if df.empty:
        return

    color_scale = alt.Scale(domain=[SCENARIOS["projected"], SCENARIOS["valuation"]],
                            range=[CLR_PROJECTED, CLR_VALUATION])
    dash_scale = alt.Scale(domain=[SCENARIOS["projected"], SCENARIOS["valuation"]],
                           range=[[1, 0], [5, 3]])
    chart = alt.Chart(df).mark_line(point=True).encode(
        x=alt.X('Year:O', title='Year'),
        y=alt.Y('Cumulative LP Distributions:Q', title='Cumulative ($)', axis=alt.Axis(format='$,.0f')),
        color=alt.Color('Scenario:N', scale=color_scale,
                        legend=alt.Legend(title=None, orient='bottom', direction='horizontal')),
        strokeDash=alt.StrokeDash('Scenario:N', scale=dash_scale, legend=None),
        tooltip=['Year', 'Scenario', alt.Tooltip('Cumulative LP Distributions:Q', format='$,.0f')],
    ).properties(height=300)
    st.altair_chart(chart, use_container_width=True)


# ============================================================
# TABLES
# ============================================================

def _render_lp_table(output: CalculationOutput):
    df = lp_performance_frame(output)
    if df.empty:
        st.info("No LPs defined.")
        return

    display = df.drop(columns=["Investor ID"]).copy()
    display["MOIC"] = display["MOIC"].map(fmt_multiple)
    display["IRR"] = df["IRR"].map(lambda x: fmt_pct(None if pd.isna(x) else x))
    st.dataframe(
        display,
        use_container_width=True,
        hide_index=True,
        column_config={
            "Allocated": st.column_config.NumberColumn(format="$%,.0f"),
            "Distributions": st.column_config.NumberColumn(format="$%,.0f"),
        },
    )

    for lp in output.lp_performance:
        if not lp.deal_breakdown:
            continue
        with st.expander(f"{lp.name}: deal breakdown"):
            st.dataframe(
                lp_deal_breakdown_frame(lp),
                use_container_width=True,
                hide_index=True,
                column_config={
                    "Investment": st.column_config.NumberColumn(format="$%,.0f"),
                    "Distributions": st.column_config.NumberColumn(format="$%,.0f"),
                },
            )


def _render_gp_table(output: CalculationOutput):
    df = gp_performance_frame(output)
    if df.empty:
        st.info("No GPs defined.")
        return
    st.dataframe(
        df.drop(columns=["Investor ID"]),
        use_container_width=True,
        hide_index=True,
        column_config={
            "Mgmt Fees": st.column_config.NumberColumn(format="$%,.0f"),
            "Carried Interest": st.column_config.NumberColumn(format="$%,.0f"),
            "Total Earnings": st.column_config.NumberColumn(format="$%,.0f"),
        },
    )


def _render_annual_table(output: CalculationOutput):
    df = yearly_breakdown_frame(output)
    df["Year"] = df["Year"].astype(str)
    st.dataframe(
        df,
        use_container_width=True,
        hide_index=True,
        column_config={
            "Year": st.column_config.TextColumn("Year"),
            "Gross Return": st.column_config.NumberColumn(format="$%,.0f"),
            "LP Distributions": st.column_config.NumberColumn(format="$%,.0f"),
            "GP Earnings": st.column_config.NumberColumn(format="$%,.0f"),
            "Total Distribution": st.column_config.NumberColumn(format="$%,.0f"),
        },
    )
