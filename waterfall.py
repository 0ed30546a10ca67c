"""
waterfall.py
Deal-by-deal waterfall tier resolver

KEY PRINCIPLES:
- Each deal-year seeds a pool with gross profit = investment * return %
- Pool is consumed in fixed order: mgmt fee, pref, GP catch-up,
  first tier split, second tier split
- Unpaid pref accrues across years; the balance lives in a per-scenario
  dict keyed by deal id, never on the Deal itself
- Bands with non-positive width distribute nothing
- Return of capital is paid on top of the waterfall in the deal's final year
"""

import logging
from typing import Dict, List, Tuple

from models import Deal, Investor, TierAllocation

logger = logging.getLogger(__name__)


# ============================================================
# PRO-RATA HELPERS
# ============================================================

def participant_shares(deal: Deal, investment: float) -> List[Tuple[str, float]]:
    """(investor_id, amount / investment) for each participant."""
    if investment <= 0:
        return [(p.investor_id, 0.0) for p in deal.participants]
    return [(p.investor_id, p.amount / investment) for p in deal.participants]


def pro_rata(amount: float, shares: List[Tuple[str, float]]) -> Dict[str, float]:
    """Split amount by share; repeated ids accumulate."""
    out: Dict[str, float] = {}
    for inv_id, share in shares:
        out[inv_id] = out.get(inv_id, 0.0) + amount * share
    return out


def gp_weights(gps: List[Investor]) -> Dict[str, float]:
    """
    Fraction of fees and carry each GP receives.

    Weighted by carry_percentage / sum(carry_percentage). When the GP
    carry weights sum to zero every GP gets an equal share.
    """
    if not gps:
        return {}
    total = sum(float(gp.carry_percentage or 0.0) for gp in gps)
    if total > 0:
        return {gp.id: float(gp.carry_percentage or 0.0) / total for gp in gps}
    return {gp.id: 1.0 / len(gps) for gp in gps}


def _credit(dest: Dict[str, float], amounts: Dict[str, float]):
    for k, v in amounts.items():
        dest[k] = dest.get(k, 0.0) + v


# ============================================================
# WATERFALL PAYMENT STEPS
# ============================================================

def pay_pref(deal: Deal, investment: float, available: float,
             pref_balances: Dict[str, float]) -> Tuple[float, float]:
    """
    Accrue this year's preferred return and pay what the pool allows.

    Args:
        deal: Deal being resolved
        investment: Total invested in the deal
        available: Pool remaining after the management fee
        pref_balances: deal_id -> unpaid pref carried forward (modified in place)

    Returns:
        (accrued, paid)
    """
    accrued = investment * (deal.preferred_return / 100.0)
    unpaid = pref_balances.get(deal.id, 0.0) + accrued

    paid = min(available, unpaid)
    if paid > 0:
        unpaid -= paid
    else:
        paid = 0.0

    pref_balances[deal.id] = unpaid
    return accrued, paid


def catch_up_band(deal: Deal, investment: float, available: float) -> float:
    """
    Profit consumed by the GP catch-up band.

    Band width is the gap between the pref and catch-up hurdles. The profit
    needed to fill it is width / (1 - first tier GP split), capped by the
    pool and floored at zero.
    """
    if available <= 0 or not deal.gp_catch_up.applies:
        return 0.0

    width = investment * ((deal.gp_catch_up.hurdle - deal.preferred_return) / 100.0)
    if width <= 0:
        return 0.0

    divisor = 1.0 - (deal.first_tier.split.gp / 100.0)
    band_profit = width / divisor if divisor > 0 else float("inf")
    return max(0.0, min(available, band_profit))


def first_tier_band(deal: Deal, investment: float, available: float) -> float:
    """Profit consumed by the first tier split band."""
    if available <= 0:
        return 0.0

    lower = deal.gp_catch_up.hurdle if deal.gp_catch_up.applies else deal.preferred_return
    width = investment * ((deal.first_tier.hurdle - lower) / 100.0)
    if width <= 0:
        return 0.0
    return min(available, width)


# ============================================================
# DEAL-YEAR RESOLUTION
# ============================================================

def resolve_year(
    deal: Deal,
    year: int,
    annual_return_pct: float,
    pref_balances: Dict[str, float],
) -> TierAllocation:
    """
    Run one deal through one year of the waterfall.

    Args:
        deal: Deal definition (not modified)
        year: 1-based year
        annual_return_pct: Return % applied this year
        pref_balances: deal_id -> unpaid pref; updated for this deal

    Returns:
        TierAllocation with tier amounts and per-LP distributions. A deal
        with zero investment returns an empty allocation and accrues nothing.
    """
    investment = deal.total_investment
    alloc = TierAllocation(year=year, deal_id=deal.id, investment=investment)

    if investment == 0:
        logger.debug("Deal %s year %d: zero investment, skipped", deal.id, year)
        return alloc

    shares = participant_shares(deal, investment)
    gross = investment * (annual_return_pct / 100.0)
    alloc.gross_profit = gross
    pool = gross

    # 1. Management fee comes off the top
    fee = investment * (deal.management_fee / 100.0)
    alloc.gp_mgmt_fee = fee
    pool -= fee

    # 2. LP preferred return
    accrued, pref_paid = pay_pref(deal, investment, pool, pref_balances)
    alloc.pref_accrued = accrued
    alloc.unpaid_pref = pref_balances[deal.id]
    if pref_paid > 0:
        alloc.lp_pref = pref_paid
        _credit(alloc.lp_distributions, pro_rata(pref_paid, shares))
        pool -= pref_paid

    # 3. GP catch-up
    consumed = catch_up_band(deal, investment, pool)
    if consumed > 0:
        gp_gets = consumed * (deal.gp_catch_up.percentage / 100.0)
        lp_gets = consumed - gp_gets
        alloc.gp_catch_up = gp_gets
        alloc.lp_catch_up = lp_gets
        _credit(alloc.lp_distributions, pro_rata(lp_gets, shares))
        pool -= consumed

    # 4. First tier split
    consumed = first_tier_band(deal, investment, pool)
    if consumed > 0:
        alloc.gp_first_tier = consumed * (deal.first_tier.split.gp / 100.0)
        alloc.lp_first_tier = consumed * (deal.first_tier.split.lp / 100.0)
        _credit(alloc.lp_distributions, pro_rata(alloc.lp_first_tier, shares))
        pool -= consumed

    # 5. Second tier takes everything left
    if pool > 0:
        alloc.gp_second_tier = pool * (deal.second_tier.split.gp / 100.0)
        alloc.lp_second_tier = pool * (deal.second_tier.split.lp / 100.0)
        _credit(alloc.lp_distributions, pro_rata(alloc.lp_second_tier, shares))

    # 6. Return of capital in the final year
    if year == deal.timeline_years:
        roc = {}
        for p in deal.participants:
            roc[p.investor_id] = roc.get(p.investor_id, 0.0) + p.amount
        _credit(alloc.lp_distributions, roc)
        alloc.return_of_capital = investment

    return alloc
