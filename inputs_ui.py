"""
inputs_ui.py
Investor and deal editors

Investors and deals live in st.session_state as model objects. Every edit
is written straight back to SQLite so the next session starts where this
one left off.
"""

import logging
from typing import List

import streamlit as st

from database import (save_investor, save_investors, remove_investor, save_deal, remove_deal,
                      toggle_deal_active, reset_to_defaults, load_investors as db_load_investors,
                      load_deals as db_load_deals)
from loaders import (investors_to_frame, load_investors, participants_to_frame,
                     apply_participants, actual_returns_to_frame, load_actual_returns,
                     validate_inputs, has_errors, issues_by_deal, capital_summary)
from models import (Investor, Deal, new_investor, new_deal, set_tier_split,
                    resize_actual_returns)

logger = logging.getLogger(__name__)


def _investors() -> List[Investor]:
    return st.session_state["investors"]


def _deals() -> List[Deal]:
    return st.session_state["deals"]


def _mark_dirty():
    """Drop cached results so the next render recomputes."""
    st.session_state.pop("_projections", None)


# ============================================================
# INVESTORS
# ============================================================

def render_investors():
    st.subheader("Investors")

    investors = _investors()
    df = investors_to_frame(investors)
    df["type"] = df["is_gp"].map({True: "GP", False: "LP"})

    edited = st.data_editor(
        df[["id", "name", "type", "commitment", "carry_percentage", "is_gp"]],
        column_config={
            "id": None,
            "is_gp": None,
            "name": st.column_config.TextColumn("Name", required=True),
            "type": st.column_config.TextColumn("Type", disabled=True),
            "commitment": st.column_config.NumberColumn("Commitment ($)", min_value=0.0, format="$%,.0f",
                                                        help="LP capital committed (informational)"),
            "carry_percentage": st.column_config.NumberColumn("Carry %", min_value=0.0, max_value=100.0,
                                                              format="%.1f",
                                                              help="GP share of carry and management fees"),
        },
        num_rows="fixed",
        hide_index=True,
        use_container_width=True,
        key="_investor_editor",
    )

    updated = load_investors(edited.drop(columns=["type"]))
    if [i.to_dict() for i in updated] != [i.to_dict() for i in investors]:
        st.session_state["investors"] = updated
        save_investors(updated)
        _mark_dirty()
        investors = updated

    c1, c2, c3, c4 = st.columns([1, 1, 2, 1])
    with c1:
        if st.button("Add GP", key="_add_gp"):
            _add_investor(is_gp=True)
    with c2:
        if st.button("Add LP", key="_add_lp"):
            _add_investor(is_gp=False)
    with c3:
        labels = {i.id: f"{i.name} ({'GP' if i.is_gp else 'LP'})" for i in investors}
        to_remove = st.selectbox("Remove investor", options=[""] + list(labels.keys()),
                                 format_func=lambda k: labels.get(k, "—"),
                                 key="_remove_investor_sel", label_visibility="collapsed")
    with c4:
        if st.button("Remove", key="_remove_investor_btn", disabled=not to_remove):
            _remove_investor(to_remove)

    summary = capital_summary(investors, _deals())
    m1, m2, m3 = st.columns(3)
    m1.metric("Total Committed", f"${summary['total_committed']:,.0f}")
    m2.metric("Total Allocated", f"${summary['total_allocated']:,.0f}")
    m3.metric("Total GP Carry", f"{summary['total_gp_carry']:.1f}%")


def _add_investor(is_gp: bool):
    inv = new_investor(is_gp, _investors())
    save_investor(inv)
    st.session_state["investors"] = _investors() + [inv]
    logger.info(f"Added investor {inv.id} ({inv.name})")
    _mark_dirty()
    st.rerun()


def _remove_investor(investor_id: str):
    remove_investor(investor_id)
    st.session_state["investors"] = [i for i in _investors() if i.id != investor_id]
    for deal in _deals():
        deal.participants = [p for p in deal.participants if p.investor_id != investor_id]
    _mark_dirty()
    st.rerun()


# ============================================================
# DEALS
# ============================================================

def render_deals():
    st.subheader("Deals")
    portfolio_notes = st.container()

    notes = {deal.id: _render_deal(deal) for deal in list(_deals())}

    # Validate after every editor has applied its changes
    issues = validate_inputs(_investors(), _deals())
    grouped = issues_by_deal(issues)
    with portfolio_notes:
        if has_errors(issues):
            st.error("Some inputs are invalid; results may be misleading until they are fixed.")
        _show_issues(grouped.get(None, []))
    for deal_id, box in notes.items():
        with box:
            _show_issues(grouped.get(deal_id, []))

    b1, b2, _ = st.columns([1, 1, 3])
    with b1:
        if st.button("Add Deal", key="_add_deal", type="primary"):
            deal = new_deal(_deals())
            st.session_state["deals"] = _deals() + [deal]
            save_deal(deal)
            _mark_dirty()
            st.rerun()
    with b2:
        if st.button("Reset to Defaults", key="_reset_defaults"):
            reset_to_defaults()
            # Widget keys hold the old values; drop them with the cached results
            for key in [k for k in st.session_state.keys() if str(k).startswith("_")]:
                del st.session_state[key]
            st.session_state["investors"] = db_load_investors()
            st.session_state["deals"] = db_load_deals()
            st.rerun()


def _show_issues(issues):
    for issue in issues:
        if issue["severity"] == "error":
            st.error(issue["message"])
        else:
            st.warning(issue["message"])


def _render_deal(deal: Deal):
    """Deal editor; returns the container that holds the deal's validation notes."""
    status = "" if deal.is_active else " (inactive)"
    with st.expander(f"{deal.name}{status} · ${deal.total_investment:,.0f}", expanded=False):
        before = deal.to_dict()
        k = deal.id

        def _on_toggle():
            active = toggle_deal_active(deal.id)
            if active is not None:
                deal.is_active = active
                _mark_dirty()

        c1, c2, c3 = st.columns([3, 1, 1])
        with c1:
            deal.name = st.text_input("Deal name", value=deal.name, key=f"_name_{k}")
        with c2:
            deal.is_active = st.toggle("Active", value=deal.is_active, key=f"_active_{k}",
                                       on_change=_on_toggle)
        with c3:
            if st.button("Remove Deal", key=f"_remove_{k}"):
                remove_deal(deal.id)
                st.session_state["deals"] = [d for d in _deals() if d.id != deal.id]
                _mark_dirty()
                st.rerun()

        c1, c2, c3, c4 = st.columns(4)
        with c1:
            deal.timeline_years = int(st.number_input("Timeline (years)", min_value=1, max_value=50,
                                                      value=int(max(1, deal.timeline_years)), step=1,
                                                      key=f"_timeline_{k}"))
        with c2:
            deal.projected_annual_return = st.number_input("Projected return %", value=float(deal.projected_annual_return),
                                                           step=0.5, key=f"_proj_{k}")
        with c3:
            deal.management_fee = st.number_input("Mgmt fee %", min_value=0.0, max_value=100.0,
                                                  value=float(deal.management_fee), step=0.25, key=f"_fee_{k}")
        with c4:
            deal.preferred_return = st.number_input("Preferred return %", min_value=0.0, max_value=100.0,
                                                    value=float(deal.preferred_return), step=0.5, key=f"_pref_{k}")
        resize_actual_returns(deal)

        _render_waterfall_structure(deal)
        _render_participants(deal)
        _render_actual_returns(deal)

        notes = st.container()

        if deal.to_dict() != before:
            save_deal(deal)
            _mark_dirty()

    return notes


def _split_inputs(label: str, tier, key: str):
    """LP/GP split pair; editing either side fills the other to 100."""
    lp_key, gp_key = f"{key}_lp", f"{key}_gp"

    def _on_lp():
        set_tier_split(tier, "lp", st.session_state[lp_key])
        st.session_state[gp_key] = tier.split.gp

    def _on_gp():
        set_tier_split(tier, "gp", st.session_state[gp_key])
        st.session_state[lp_key] = tier.split.lp

    # Seed widget state once; callbacks keep both keys in sync afterwards
    st.session_state.setdefault(lp_key, float(tier.split.lp))
    st.session_state.setdefault(gp_key, float(tier.split.gp))

    c1, c2 = st.columns(2)
    with c1:
        st.number_input(f"{label} LP %", min_value=0.0, max_value=100.0,
                        step=5.0, key=lp_key, on_change=_on_lp)
    with c2:
        st.number_input(f"{label} GP %", min_value=0.0, max_value=100.0,
                        step=5.0, key=gp_key, on_change=_on_gp)


def _render_waterfall_structure(deal: Deal):
    k = deal.id
    st.markdown("**Waterfall**")

    cu = deal.gp_catch_up
    c1, c2, c3 = st.columns(3)
    with c1:
        cu.applies = st.checkbox("GP catch-up", value=cu.applies, key=f"_cu_applies_{k}")
    with c2:
        cu.percentage = st.number_input("Catch-up GP %", min_value=0.0, max_value=100.0,
                                        value=float(cu.percentage), step=5.0,
                                        disabled=not cu.applies, key=f"_cu_pct_{k}")
    with c3:
        cu.hurdle = st.number_input("Catch-up hurdle %", min_value=0.0, value=float(cu.hurdle),
                                    step=0.5, disabled=not cu.applies, key=f"_cu_hurdle_{k}")

    deal.first_tier.hurdle = st.number_input("First tier hurdle %", min_value=0.0,
                                             value=float(deal.first_tier.hurdle), step=0.5,
                                             key=f"_t1_hurdle_{k}")
    _split_inputs("First tier", deal.first_tier, f"_t1_{k}")
    _split_inputs("Second tier", deal.second_tier, f"_t2_{k}")


def _render_participants(deal: Deal):
    lps = [i for i in _investors() if i.is_lp]
    st.markdown("**LP Allocations**")
    if not lps:
        st.info("Add an LP to allocate capital to this deal.")
        return

    edited = st.data_editor(
        participants_to_frame(deal, lps),
        column_config={
            "investor_id": None,
            "name": st.column_config.TextColumn("LP", disabled=True),
            "amount": st.column_config.NumberColumn("Amount ($)", min_value=0.0, format="$%,.0f"),
        },
        num_rows="fixed",
        hide_index=True,
        use_container_width=True,
        key=f"_participants_{deal.id}",
    )
    apply_participants(deal, edited)


def _render_actual_returns(deal: Deal):
    st.markdown("**Actual Annual Returns** (blank = not yet known, counts as 0%)")
    edited = st.data_editor(
        actual_returns_to_frame(deal),
        column_config={
            "Year": st.column_config.NumberColumn("Year", format="%d", disabled=True),
            "Return %": st.column_config.NumberColumn("Return %", format="%.1f"),
        },
        num_rows="fixed",
        hide_index=True,
        use_container_width=True,
        key=f"_actuals_{deal.id}_{deal.timeline_years}",
    )
    deal.actual_annual_returns = load_actual_returns(edited)
