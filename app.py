# app.py
# Deal-by-Deal Waterfall Calculator
# - Investors (LPs / GPs) and deals persisted in SQLite
# - Projected (flat return) vs. valuation (actual year-by-year returns) scenarios
# - Results recomputed whenever an input changes

import logging

import streamlit as st

from compute import calculate_projections
from database import init_database, load_investors, load_deals
from inputs_ui import render_investors, render_deals
from results_ui import render_results

logger = logging.getLogger(__name__)


# ============================================================
# STATE
# ============================================================
def load_state():
    """Load investors and deals from the database once per session."""
    if "investors" in st.session_state and "deals" in st.session_state:
        return
    init_database()
    st.session_state["investors"] = load_investors()
    st.session_state["deals"] = load_deals()
    logger.info(f"Loaded {len(st.session_state['investors'])} investors, "
                f"{len(st.session_state['deals'])} deals")


def get_projections():
    """Cached projections; inputs_ui drops the cache on every edit."""
    cached = st.session_state.get("_projections")
    if cached is not None:
        return cached
    projections = calculate_projections(st.session_state["investors"], st.session_state["deals"])
    st.session_state["_projections"] = projections
    return projections


# ============================================================
# PAGE
# ============================================================
st.set_page_config(page_title="Waterfall Calculator", layout="wide")
st.title("Deal-by-Deal Waterfall Calculator")

try:
    load_state()
except Exception as e:
    logger.exception("Failed to load saved data")
    st.error(f"Could not load saved data: {e}")
    st.stop()

tab_inputs, tab_results = st.tabs(["Inputs", "Results"])

with tab_inputs:
    render_investors()
    st.markdown("---")
    render_deals()

with tab_results:
    try:
        render_results(get_projections())
    except Exception as e:
        logger.exception("Calculation failed")
        st.error(f"Calculation failed: {e}")

st.caption(
    "Each deal runs its own waterfall: management fee, LP preferred return (accrues if unpaid), "
    "GP catch-up, first tier split, second tier split. Capital is returned in the deal's final year."
)
