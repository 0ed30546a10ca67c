"""
compute.py
Projection orchestrator - separated from display so the app can cache results.

Runs the scenario engine once per scenario (projected vs. valuation) on
independent deep copies of the deal list, then builds the shared cumulative
LP return comparison series.
"""

import copy
import logging
from typing import List, Sequence

from models import Investor, Deal, Projections, CumulativeReturnPoint, CalculationOutput
from scenario import run_scenario, max_timeline

logger = logging.getLogger(__name__)


def valuation_has_data(deals: Sequence[Deal]) -> bool:
    """True if any deal has at least one non-null actual return."""
    return any(r is not None for d in deals for r in d.actual_annual_returns)


def valuation_has_results(projections: Projections) -> bool:
    """True if the valuation scenario produced any return or LP cash."""
    return any(
        y.gross_return != 0 or y.lp_distributions != 0
        for y in projections.valuation.yearly_breakdown
    )


def cumulative_return_series(
    projected: CalculationOutput,
    valuation: CalculationOutput,
    n_years: int,
    has_valuation: bool,
) -> List[CumulativeReturnPoint]:
    """
    Cumulative LP distributions by year, projected vs. valuation.

    The valuation side is None for every year when no actual returns were
    ever entered, so "nothing modeled" is distinguishable from zero.
    """
    proj_by_year = {y.year: y.lp_distributions for y in projected.yearly_breakdown}
    val_by_year = {y.year: y.lp_distributions for y in valuation.yearly_breakdown}

    out = []
    cum_proj = 0.0
    cum_val = 0.0
    for year in range(1, n_years + 1):
        cum_proj += proj_by_year.get(year, 0.0)
        cum_val += val_by_year.get(year, 0.0)
        out.append(CumulativeReturnPoint(
            year=year,
            projected=cum_proj,
            valuation=cum_val if has_valuation else None,
        ))
    return out


def calculate_projections(investors: Sequence[Investor], deals: Sequence[Deal]) -> Projections:
    """
    Run both scenarios for the active deals.

    Args:
        investors: LPs and GPs
        deals: Deal definitions; inactive deals are ignored

    Returns:
        Projections with both scenario outputs and the cumulative series
    """
    active = [d for d in deals if d.is_active]

    projected = run_scenario(investors, copy.deepcopy(active), use_projected=True)
    valuation = run_scenario(investors, copy.deepcopy(active), use_projected=False)

    series = cumulative_return_series(
        projected, valuation, max_timeline(active), valuation_has_data(active)
    )
    projected.cumulative_return_chart = series
    valuation.cumulative_return_chart = series

    logger.debug("Projections complete: %d active deals, %d years", len(active), len(series))
    return Projections(projected=projected, valuation=valuation, cumulative_return_chart=series)
