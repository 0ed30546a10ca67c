"""
metrics.py
Investment performance metrics: IRR, MOIC, LP/GP performance records
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from config import (IRR_INITIAL_GUESS, IRR_TOLERANCE, IRR_ACCEPT_TOLERANCE,
                    IRR_MAX_ITERATIONS)
from models import (Investor, LPPerformance, LPDealPerformance, GPPerformance,
                    SummaryMetrics)

logger = logging.getLogger(__name__)


# ============================================================
# IRR SOLVER
# ============================================================

def npv(rate: float, cashflows: Sequence[float]) -> float:
    """
    Net present value of annual cashflows

    Args:
        rate: Annual discount rate (as decimal, e.g., 0.10 for 10%)
        cashflows: Amounts indexed by year 0..N

    Returns:
        Σ cf[t] / (1 + rate)^t
    """
    cfs = np.asarray(cashflows, dtype=float)
    if cfs.size == 0:
        return 0.0
    t = np.arange(cfs.size)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return float(np.sum(cfs / (1.0 + rate) ** t))


def irr(cashflows: Sequence[float]) -> Optional[float]:
    """
    Internal Rate of Return by Newton-Raphson

    Starts at 10% and stops as soon as |NPV| < 1e-6. Gives up early if the
    derivative is exactly zero and never runs more than 100 iterations. The
    final rate is still accepted if |NPV| < 1e-4 at that point.

    Args:
        cashflows: Amounts indexed by year 0..N. Negative = investment,
                   positive = distribution.

    Returns:
        Annual IRR as decimal (e.g., 0.10 for 10%)
        None if there is no initial investment or the solver did not converge
    """
    cfs = np.asarray(cashflows, dtype=float)
    if cfs.size == 0 or cfs[0] >= 0:
        return None

    t = np.arange(cfs.size)
    rate = IRR_INITIAL_GUESS

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for _ in range(IRR_MAX_ITERATIONS):
            disc = (1.0 + rate) ** t
            value = np.sum(cfs / disc)
            slope = np.sum(-t * cfs / (disc * (1.0 + rate)))

            if abs(value) < IRR_TOLERANCE:
                return float(rate)
            if slope == 0:
                break
            rate = rate - value / slope

        final = np.sum(cfs / (1.0 + rate) ** t)

    if abs(final) < IRR_ACCEPT_TOLERANCE:
        return float(rate)

    logger.debug("IRR did not converge (final rate %s, NPV %s)", rate, final)
    return None


# ============================================================
# MULTIPLES
# ============================================================

def calculate_moic(distributions: float, allocated: float) -> float:
    """
    Multiple on Invested Capital

    MOIC = Total Distributions / Total Invested. Zero invested gives 0.0,
    not an undefined result.
    """
    if allocated == 0:
        return 0.0
    return distributions / allocated


# ============================================================
# PERFORMANCE RECORDS
# ============================================================

def build_lp_performance(
    lp: Investor,
    allocated: float,
    cashflows: Sequence[float],
    deal_breakdown: Dict[str, LPDealPerformance],
) -> LPPerformance:
    """
    Calculate one LP's totals, MOIC and IRR

    Args:
        lp: The limited partner
        allocated: Sum of the LP's participation across deals
        cashflows: Year 0..N vector; year 0 is -allocated
        deal_breakdown: deal_id -> investment/distribution for drill-down

    Returns:
        LPPerformance
    """
    cfs = [float(x) for x in cashflows]
    distributions = float(sum(cfs[1:]))
    return LPPerformance(
        investor_id=lp.id,
        name=lp.name,
        allocated=float(allocated),
        distributions=distributions,
        moic=calculate_moic(distributions, allocated),
        irr=irr(cfs),
        cashflows=cfs,
        deal_breakdown=list(deal_breakdown.values()),
    )


def build_gp_performance(
    gp: Investor,
    management_fees: Sequence[float],
    carried_interest: Sequence[float],
) -> GPPerformance:
    """Sum a GP's yearly management fee and carry shares."""
    return GPPerformance(
        investor_id=gp.id,
        name=gp.name,
        management_fees=float(np.sum(management_fees)),
        carried_interest=float(np.sum(carried_interest)),
    )


def build_summary_metrics(
    lp_performance: List[LPPerformance],
    gp_performance: List[GPPerformance],
) -> SummaryMetrics:
    """Portfolio totals across all LPs and GPs."""
    total_dist = sum(p.distributions for p in lp_performance)
    total_alloc = sum(p.allocated for p in lp_performance)
    return SummaryMetrics(
        total_lp_distributions=total_dist,
        total_lp_allocated=total_alloc,
        total_gp_earnings=sum(p.total_earnings for p in gp_performance),
        total_gp_carried_interest=sum(p.carried_interest for p in gp_performance),
        total_gp_management_fees=sum(p.management_fees for p in gp_performance),
        overall_lp_moic=calculate_moic(total_dist, total_alloc),
    )
