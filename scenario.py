"""
scenario.py
Scenario engine: drives the year loop for one return scenario

For each year 1..N every active deal still inside its timeline is run
through the tier resolver. Results are fanned out to:
- per-LP year cashflows and per-deal drill-down
- per-GP management fee and carry shares (by carry weight)
- annual tier chart totals and the yearly breakdown
"""

import logging
from typing import Dict, List, Sequence

import numpy as np

from models import (Investor, Deal, AnnualTierRow, YearlyBreakdownRow,
                    LPDealPerformance, CalculationOutput, TierAllocation)
from waterfall import resolve_year, gp_weights
from metrics import build_lp_performance, build_gp_performance, build_summary_metrics

logger = logging.getLogger(__name__)


def max_timeline(deals: Sequence[Deal]) -> int:
    return max([0] + [int(d.timeline_years) for d in deals])


def cumulative_tier_chart(annual: List[AnnualTierRow]) -> List[AnnualTierRow]:
    """Running tier-by-tier totals of the annual tier chart."""
    out: List[AnnualTierRow] = []
    last = AnnualTierRow(year=0)
    for row in annual:
        last = AnnualTierRow(
            year=row.year,
            lp_pref=last.lp_pref + row.lp_pref,
            lp_profit_share=last.lp_profit_share + row.lp_profit_share,
            gp_catch_up=last.gp_catch_up + row.gp_catch_up,
            gp_profit_share=last.gp_profit_share + row.gp_profit_share,
            gp_mgmt_fee=last.gp_mgmt_fee + row.gp_mgmt_fee,
        )
        out.append(last)
    return out


def _add_to_tier_row(row: AnnualTierRow, alloc: TierAllocation):
    row.gp_mgmt_fee += alloc.gp_mgmt_fee
    row.lp_pref += alloc.lp_pref
    row.gp_catch_up += alloc.gp_catch_up
    row.gp_profit_share += alloc.gp_profit_share
    row.lp_profit_share += alloc.lp_profit_share


def run_scenario(
    investors: Sequence[Investor],
    deals: Sequence[Deal],
    use_projected: bool,
) -> CalculationOutput:
    """
    Run every active deal through the waterfall for one scenario.

    Args:
        investors: LPs and GPs
        deals: Deal definitions (not modified)
        use_projected: True = flat projected return,
                       False = year-by-year actual returns (None -> 0%)

    Returns:
        CalculationOutput without the cross-scenario cumulative return
        series (filled in by compute.calculate_projections)
    """
    deals = [d for d in deals if d.is_active]
    lps = [i for i in investors if i.is_lp]
    gps = [i for i in investors if i.is_gp]
    weights = gp_weights(gps)
    n_years = max_timeline(deals)

    logger.debug("Running %s scenario: %d deals, %d LPs, %d GPs, %d years",
                 "projected" if use_projected else "valuation",
                 len(deals), len(lps), len(gps), n_years)

    # ------------------------------------------------------------------
    # LP accumulators
    # ------------------------------------------------------------------
    lp_ids = {lp.id for lp in lps}
    allocated: Dict[str, float] = {lp.id: 0.0 for lp in lps}
    breakdown: Dict[str, Dict[str, LPDealPerformance]] = {lp.id: {} for lp in lps}

    for deal in deals:
        for p in deal.participants:
            if p.investor_id not in lp_ids:
                continue
            allocated[p.investor_id] += p.amount
            rec = breakdown[p.investor_id].get(deal.id)
            if rec is None:
                rec = LPDealPerformance(deal_id=deal.id, deal_name=deal.name)
                breakdown[p.investor_id][deal.id] = rec
            rec.investment += p.amount

    cashflows: Dict[str, np.ndarray] = {lp.id: np.zeros(n_years + 1) for lp in lps}
    for lp in lps:
        cashflows[lp.id][0] = -allocated[lp.id]

    # ------------------------------------------------------------------
    # GP accumulators
    # ------------------------------------------------------------------
    gp_fees: Dict[str, np.ndarray] = {gp.id: np.zeros(n_years + 1) for gp in gps}
    gp_carry: Dict[str, np.ndarray] = {gp.id: np.zeros(n_years + 1) for gp in gps}

    # ------------------------------------------------------------------
    # Year loop
    # ------------------------------------------------------------------
    pref_balances: Dict[str, float] = {}
    allocations: List[TierAllocation] = []
    annual_tiers: List[AnnualTierRow] = []
    yearly: List[YearlyBreakdownRow] = []

    for year in range(1, n_years + 1):
        tier_row = AnnualTierRow(year=year)
        year_row = YearlyBreakdownRow(year=year)

        for deal in deals:
            if year > deal.timeline_years:
                continue

            pct = deal.return_for_year(year, use_projected)
            alloc = resolve_year(deal, year, pct, pref_balances)
            if alloc.investment == 0:
                continue

            allocations.append(alloc)
            year_row.gross_return += alloc.gross_profit
            _add_to_tier_row(tier_row, alloc)

            for gp_id, w in weights.items():
                gp_fees[gp_id][year] += alloc.gp_mgmt_fee * w
                gp_carry[gp_id][year] += alloc.gp_carry * w

            for inv_id, amt in alloc.lp_distributions.items():
                if inv_id not in lp_ids:
                    continue
                cashflows[inv_id][year] += amt
                breakdown[inv_id][deal.id].distribution += amt

        year_row.lp_distributions = float(sum(cashflows[lp.id][year] for lp in lps))
        year_row.gp_earnings = float(sum(gp_fees[g][year] + gp_carry[g][year] for g in weights))

        annual_tiers.append(tier_row)
        yearly.append(year_row)

    # ------------------------------------------------------------------
    # Performance records
    # ------------------------------------------------------------------
    lp_performance = [
        build_lp_performance(lp, allocated[lp.id], cashflows[lp.id], breakdown[lp.id])
        for lp in lps
    ]
    gp_performance = [
        build_gp_performance(gp, gp_fees[gp.id][1:], gp_carry[gp.id][1:])
        for gp in gps
    ]

    return CalculationOutput(
        summary_metrics=build_summary_metrics(lp_performance, gp_performance),
        yearly_breakdown=yearly,
        annual_tier_chart=annual_tiers,
        cumulative_tier_chart=cumulative_tier_chart(annual_tiers),
        lp_performance=lp_performance,
        gp_performance=gp_performance,
        allocations=allocations,
    )
