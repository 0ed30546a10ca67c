"""
loaders.py
Table normalization and input validation for investors and deals

The editors in the app work on DataFrames (st.data_editor); these helpers
convert between those tables and the model objects, and check inputs
before they reach the engine.
"""

from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from config import CARRY_TARGET_TOTAL, SPLIT_TOLERANCE
from models import Investor, Deal, Participant


INVESTOR_COLUMNS = ["id", "name", "is_gp", "commitment", "carry_percentage"]


# ============================================================
# INVESTORS
# ============================================================

def investors_to_frame(investors: Sequence[Investor]) -> pd.DataFrame:
    """Investors as a DataFrame with INVESTOR_COLUMNS."""
    return pd.DataFrame([i.to_dict() for i in investors], columns=INVESTOR_COLUMNS)


def load_investors(df: pd.DataFrame) -> List[Investor]:
    """
    Normalize an investors table into Investor objects

    Args:
        df: DataFrame with at least id, name, is_gp

    Returns:
        List of Investor; rows with a blank id are dropped
    """
    d = df.copy()
    d.columns = [str(c).strip() for c in d.columns]

    required = {"id", "name", "is_gp"}
    missing = [c for c in required if c not in d.columns]
    if missing:
        raise ValueError(f"investors table missing columns: {sorted(missing)}")

    d["id"] = d["id"].fillna("").astype(str).str.strip()
    d = d[d["id"] != ""].copy()
    d["name"] = d["name"].fillna("").astype(str).str.strip()
    d["is_gp"] = d["is_gp"].fillna(False).astype(bool)

    for col in ("commitment", "carry_percentage"):
        if col not in d.columns:
            d[col] = 0.0
        d[col] = pd.to_numeric(d[col], errors="coerce").fillna(0.0).astype(float)

    return [
        Investor(
            id=r["id"],
            name=r["name"],
            is_gp=bool(r["is_gp"]),
            commitment=float(r["commitment"]),
            carry_percentage=float(r["carry_percentage"]),
        )
        for r in d.to_dict("records")
    ]


# ============================================================
# DEAL SUB-TABLES
# ============================================================

def participants_to_frame(deal: Deal, lps: Sequence[Investor]) -> pd.DataFrame:
    """One row per LP with its allocation in this deal (0 if none)."""
    return pd.DataFrame({
        "investor_id": [lp.id for lp in lps],
        "name": [lp.name for lp in lps],
        "amount": [deal.participant_amount(lp.id) for lp in lps],
    })


def apply_participants(deal: Deal, df: pd.DataFrame) -> Deal:
    """Replace a deal's participants from an allocation table.

    Rows with a zero or blank amount are dropped.
    """
    d = df.copy()
    d.columns = [str(c).strip() for c in d.columns]
    missing = [c for c in ("investor_id", "amount") if c not in d.columns]
    if missing:
        raise ValueError(f"participants table missing columns: {missing}")

    d["amount"] = pd.to_numeric(d["amount"], errors="coerce").fillna(0.0).astype(float)
    d = d[d["amount"] > 0]
    deal.participants = [
        Participant(investor_id=str(r["investor_id"]), amount=float(r["amount"]))
        for r in d.to_dict("records")
    ]
    return deal


def actual_returns_to_frame(deal: Deal) -> pd.DataFrame:
    """Year-by-year actual returns; blanks are NaN."""
    years = list(range(1, int(deal.timeline_years) + 1))
    vals = [
        deal.actual_annual_returns[y - 1] if y - 1 < len(deal.actual_annual_returns) else None
        for y in years
    ]
    return pd.DataFrame({
        "Year": years,
        "Return %": pd.Series([np.nan if v is None else v for v in vals], dtype=float),
    })


def load_actual_returns(df: pd.DataFrame) -> List[Optional[float]]:
    """Actual returns table -> list of Optional[float] ordered by Year."""
    d = df.copy()
    d.columns = [str(c).strip() for c in d.columns]
    if "Return %" not in d.columns:
        raise ValueError("actual returns table missing column: Return %")
    if "Year" in d.columns:
        d = d.sort_values("Year")
    vals = pd.to_numeric(d["Return %"], errors="coerce")
    return [None if pd.isna(v) else float(v) for v in vals]


# ============================================================
# VALIDATION
# ============================================================

def _issue(severity: str, message: str, deal_id: str = None) -> Dict[str, str]:
    out = {"severity": severity, "message": message}
    if deal_id is not None:
        out["deal_id"] = deal_id
    return out


def _check_pct(issues: list, deal: Deal, label: str, value: float):
    if value < 0 or value > 100:
        issues.append(_issue("error", f"{deal.name}: {label} must be between 0 and 100 (got {value:g})", deal.id))


def validate_inputs(investors: Sequence[Investor], deals: Sequence[Deal]) -> List[Dict[str, str]]:
    """
    Check investors and deals before running the engine

    The engine does not reject malformed percentages; it clamps. These checks
    surface problems to the user instead.

    Returns:
        List of {'severity': 'error'|'warning', 'message': str[, 'deal_id']}
    """
    issues: List[Dict[str, str]] = []
    by_id = {i.id: i for i in investors}

    for inv in investors:
        if inv.commitment < 0:
            issues.append(_issue("error", f"{inv.name}: commitment cannot be negative"))
        if inv.carry_percentage < 0:
            issues.append(_issue("error", f"{inv.name}: carry percentage cannot be negative"))

    gps = [i for i in investors if i.is_gp]
    carry_total = sum(gp.carry_percentage for gp in gps)
    if gps and round(carry_total) != round(CARRY_TARGET_TOTAL):
        issues.append(_issue("warning", f"Total GP carry is {carry_total:g}%, should be {CARRY_TARGET_TOTAL:g}%."))

    for deal in deals:
        if deal.timeline_years <= 0:
            issues.append(_issue("error", f"{deal.name}: timeline must be at least 1 year", deal.id))

        _check_pct(issues, deal, "management fee", deal.management_fee)
        _check_pct(issues, deal, "preferred return", deal.preferred_return)
        _check_pct(issues, deal, "catch-up GP share", deal.gp_catch_up.percentage)
        for label, split in (("first tier", deal.first_tier.split), ("second tier", deal.second_tier.split)):
            _check_pct(issues, deal, f"{label} LP split", split.lp)
            _check_pct(issues, deal, f"{label} GP split", split.gp)
            if abs(split.lp + split.gp - 100.0) > SPLIT_TOLERANCE:
                issues.append(_issue("error", f"{deal.name}: {label} split must sum to 100 (got {split.lp + split.gp:g})", deal.id))

        if deal.gp_catch_up.applies:
            if deal.gp_catch_up.hurdle <= deal.preferred_return:
                issues.append(_issue("warning", f"{deal.name}: catch-up hurdle is not above the preferred return; catch-up band is empty", deal.id))
            if deal.first_tier.hurdle <= deal.gp_catch_up.hurdle:
                issues.append(_issue("warning", f"{deal.name}: first tier hurdle is not above the catch-up hurdle; first tier band is empty", deal.id))
        elif deal.first_tier.hurdle <= deal.preferred_return:
            issues.append(_issue("warning", f"{deal.name}: first tier hurdle is not above the preferred return; first tier band is empty", deal.id))

        if len(deal.actual_annual_returns) < deal.timeline_years:
            issues.append(_issue("warning", f"{deal.name}: fewer actual returns than timeline years; missing years count as 0%", deal.id))

        for p in deal.participants:
            if p.amount < 0:
                issues.append(_issue("error", f"{deal.name}: participant amount cannot be negative", deal.id))
            inv = by_id.get(p.investor_id)
            if inv is None:
                issues.append(_issue("error", f"{deal.name}: unknown participant {p.investor_id}", deal.id))
            elif inv.is_gp:
                issues.append(_issue("error", f"{deal.name}: {inv.name} is a GP; only LPs can participate", deal.id))

    summary = capital_summary(investors, deals)
    if summary["total_allocated"] > summary["total_committed"]:
        issues.append(_issue(
            "warning",
            f"Total allocated to deals (${summary['total_allocated']:,.0f}) exceeds "
            f"total committed capital (${summary['total_committed']:,.0f}).",
        ))

    return issues


def has_errors(issues: List[Dict[str, str]]) -> bool:
    return any(i["severity"] == "error" for i in issues)


def issues_by_deal(issues: List[Dict[str, str]]) -> Dict[Optional[str], List[Dict[str, str]]]:
    """Group issues by deal id; portfolio-wide issues sit under None."""
    grouped: Dict[Optional[str], List[Dict[str, str]]] = {}
    for issue in issues:
        grouped.setdefault(issue.get("deal_id"), []).append(issue)
    return grouped


def capital_summary(investors: Sequence[Investor], deals: Sequence[Deal]) -> Dict[str, float]:
    """Committed LP capital, capital allocated to deals and GP carry total."""
    return {
        "total_committed": float(sum(i.commitment for i in investors if i.is_lp)),
        "total_allocated": float(sum(d.total_investment for d in deals)),
        "total_gp_carry": float(sum(i.carry_percentage for i in investors if i.is_gp)),
    }
