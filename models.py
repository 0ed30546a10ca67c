"""
models.py
Data structures for the deal-by-deal waterfall model
"""

import copy
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from config import NEW_DEAL_DEFAULTS


# ============================================================
# INVESTORS
# ============================================================

@dataclass
class Investor:
    """An LP (capital provider) or GP (manager with a carry stake).

    commitment is informational for LPs and never enforced by the engine.
    carry_percentage is a relative weight used to split carried interest and
    management fees among GPs; it does not have to total 100.
    """
    id: str
    name: str
    is_gp: bool = False
    commitment: float = 0.0
    carry_percentage: float = 0.0

    @property
    def is_lp(self) -> bool:
        return not self.is_gp

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_gp": bool(self.is_gp),
            "commitment": float(self.commitment),
            "carry_percentage": float(self.carry_percentage),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Investor":
        return cls(
            id=str(d["id"]),
            name=str(d.get("name", "")),
            is_gp=bool(d.get("is_gp", False)),
            commitment=float(d.get("commitment") or 0.0),
            carry_percentage=float(d.get("carry_percentage") or 0.0),
        )


def new_investor(is_gp: bool, existing: List[Investor]) -> Investor:
    """Create a blank GP or LP named after the count of its kind."""
    same_kind = [i for i in existing if i.is_gp == is_gp]
    label = "GP" if is_gp else "LP"
    return Investor(
        id=f"inv_{time.time_ns()}",
        name=f"New {label} {len(same_kind) + 1}",
        is_gp=is_gp,
        commitment=0.0,
        carry_percentage=0.0,
    )


# ============================================================
# WATERFALL STRUCTURE
# ============================================================

@dataclass
class TierSplit:
    """LP/GP split in percent (expected to sum to 100)."""
    lp: float = 80.0
    gp: float = 20.0


@dataclass
class GPCatchUp:
    applies: bool = True
    percentage: float = 100.0   # GP share inside the catch-up band
    hurdle: float = 10.0        # cumulative return % at which catch-up ends


@dataclass
class FirstTier:
    split: TierSplit = field(default_factory=TierSplit)
    hurdle: float = 15.0        # cumulative return % at which this tier ends


@dataclass
class SecondTier:
    split: TierSplit = field(default_factory=lambda: TierSplit(lp=60.0, gp=40.0))


@dataclass
class Participant:
    investor_id: str
    amount: float = 0.0


# ============================================================
# DEALS
# ============================================================

@dataclass
class Deal:
    """A single investment with its own waterfall.

    actual_annual_returns holds one nullable % per year; None (or a missing
    entry) counts as 0% in the valuation scenario.
    """
    id: str
    name: str
    is_active: bool = True
    timeline_years: int = 5
    management_fee: float = 0.0
    preferred_return: float = 8.0
    projected_annual_return: float = 10.0
    actual_annual_returns: List[Optional[float]] = field(default_factory=list)
    participants: List[Participant] = field(default_factory=list)
    gp_catch_up: GPCatchUp = field(default_factory=GPCatchUp)
    first_tier: FirstTier = field(default_factory=FirstTier)
    second_tier: SecondTier = field(default_factory=SecondTier)

    @property
    def total_investment(self) -> float:
        return sum(p.amount for p in self.participants)

    def return_for_year(self, year: int, use_projected: bool) -> float:
        """Annual return % applied in a given 1-based year."""
        if use_projected:
            return float(self.projected_annual_return)
        idx = year - 1
        if 0 <= idx < len(self.actual_annual_returns):
            r = self.actual_annual_returns[idx]
            return float(r) if r is not None else 0.0
        return 0.0

    def participant_amount(self, investor_id: str) -> float:
        return sum(p.amount for p in self.participants if p.investor_id == investor_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_active": bool(self.is_active),
            "timeline_years": int(self.timeline_years),
            "management_fee": float(self.management_fee),
            "preferred_return": float(self.preferred_return),
            "projected_annual_return": float(self.projected_annual_return),
            "actual_annual_returns": [
                None if r is None else float(r) for r in self.actual_annual_returns
            ],
            "participants": [
                {"investor_id": p.investor_id, "amount": float(p.amount)}
                for p in self.participants
            ],
            "gp_catch_up": {
                "applies": bool(self.gp_catch_up.applies),
                "percentage": float(self.gp_catch_up.percentage),
                "hurdle": float(self.gp_catch_up.hurdle),
            },
            "first_tier": {
                "split": {"lp": float(self.first_tier.split.lp), "gp": float(self.first_tier.split.gp)},
                "hurdle": float(self.first_tier.hurdle),
            },
            "second_tier": {
                "split": {"lp": float(self.second_tier.split.lp), "gp": float(self.second_tier.split.gp)},
            },
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Deal":
        cu = d.get("gp_catch_up") or {}
        t1 = d.get("first_tier") or {}
        t2 = d.get("second_tier") or {}
        t1_split = t1.get("split") or {}
        t2_split = t2.get("split") or {}
        return cls(
            id=str(d["id"]),
            name=str(d.get("name", "")),
            is_active=bool(d.get("is_active", True)),
            timeline_years=int(d.get("timeline_years") or 0),
            management_fee=float(d.get("management_fee") or 0.0),
            preferred_return=float(d.get("preferred_return") or 0.0),
            projected_annual_return=float(d.get("projected_annual_return") or 0.0),
            actual_annual_returns=[
                None if r is None else float(r) for r in d.get("actual_annual_returns", [])
            ],
            participants=[
                Participant(investor_id=str(p["investor_id"]), amount=float(p.get("amount") or 0.0))
                for p in d.get("participants", [])
            ],
            gp_catch_up=GPCatchUp(
                applies=bool(cu.get("applies", False)),
                percentage=float(cu.get("percentage") or 0.0),
                hurdle=float(cu.get("hurdle") or 0.0),
            ),
            first_tier=FirstTier(
                split=TierSplit(lp=float(t1_split.get("lp") or 0.0), gp=float(t1_split.get("gp") or 0.0)),
                hurdle=float(t1.get("hurdle") or 0.0),
            ),
            second_tier=SecondTier(
                split=TierSplit(lp=float(t2_split.get("lp") or 0.0), gp=float(t2_split.get("gp") or 0.0)),
            ),
        )


def new_deal(existing: List[Deal]) -> Deal:
    """Create a deal pre-filled with NEW_DEAL_DEFAULTS."""
    d = copy.deepcopy(NEW_DEAL_DEFAULTS)
    d["id"] = f"deal_{time.time_ns()}"
    d["name"] = f"New Deal {len(existing) + 1}"
    d["actual_annual_returns"] = [None] * int(d["timeline_years"])
    return Deal.from_dict(d)


# ------------------------------------------------------------------
# Typed setters for nested fields (used by the input editors)
# ------------------------------------------------------------------

def set_tier_split(tier, party: str, value: float):
    """Set one side of a tier split and fill the other side to 100."""
    value = float(value)
    if party == "lp":
        tier.split.lp = value
        tier.split.gp = 100.0 - value
    elif party == "gp":
        tier.split.gp = value
        tier.split.lp = 100.0 - value
    else:
        raise ValueError(f"Unknown split party: {party}")


def resize_actual_returns(deal: Deal):
    """Pad (with None) or truncate actual returns to the deal's timeline."""
    n = max(0, int(deal.timeline_years))
    cur = list(deal.actual_annual_returns)
    if len(cur) < n:
        cur.extend([None] * (n - len(cur)))
    deal.actual_annual_returns = cur[:n]


# ============================================================
# CALCULATION RESULTS
# ============================================================

@dataclass
class TierAllocation:
    """Tier-by-tier result of running one deal through one year.

    lp_distributions maps investor_id -> total cash received this year from
    this deal (pref + LP tier shares + return of capital).
    """
    year: int
    deal_id: str
    investment: float = 0.0
    gross_profit: float = 0.0
    gp_mgmt_fee: float = 0.0
    lp_pref: float = 0.0
    gp_catch_up: float = 0.0
    lp_catch_up: float = 0.0
    gp_first_tier: float = 0.0
    lp_first_tier: float = 0.0
    gp_second_tier: float = 0.0
    lp_second_tier: float = 0.0
    return_of_capital: float = 0.0
    pref_accrued: float = 0.0
    unpaid_pref: float = 0.0     # balance carried forward after this year
    lp_distributions: Dict[str, float] = field(default_factory=dict)

    @property
    def gp_profit_share(self) -> float:
        return self.gp_first_tier + self.gp_second_tier

    @property
    def lp_profit_share(self) -> float:
        return self.lp_catch_up + self.lp_first_tier + self.lp_second_tier

    @property
    def gp_carry(self) -> float:
        return self.gp_catch_up + self.gp_profit_share

    @property
    def total_allocated(self) -> float:
        return (self.gp_mgmt_fee + self.lp_pref + self.gp_catch_up + self.lp_catch_up
                + self.gp_first_tier + self.lp_first_tier
                + self.gp_second_tier + self.lp_second_tier)


@dataclass
class AnnualTierRow:
    year: int
    lp_pref: float = 0.0
    lp_profit_share: float = 0.0
    gp_catch_up: float = 0.0
    gp_profit_share: float = 0.0
    gp_mgmt_fee: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "year": self.year,
            "lp_pref": self.lp_pref,
            "lp_profit_share": self.lp_profit_share,
            "gp_catch_up": self.gp_catch_up,
            "gp_profit_share": self.gp_profit_share,
            "gp_mgmt_fee": self.gp_mgmt_fee,
        }


@dataclass
class YearlyBreakdownRow:
    year: int
    gross_return: float = 0.0
    lp_distributions: float = 0.0
    gp_earnings: float = 0.0

    @property
    def total_distribution(self) -> float:
        return self.lp_distributions + self.gp_earnings


@dataclass
class LPDealPerformance:
    deal_id: str
    deal_name: str
    investment: float = 0.0
    distribution: float = 0.0


@dataclass
class LPPerformance:
    investor_id: str
    name: str
    allocated: float = 0.0
    distributions: float = 0.0
    moic: float = 0.0
    irr: Optional[float] = None   # None = undefined / did not converge
    cashflows: List[float] = field(default_factory=list)
    deal_breakdown: List[LPDealPerformance] = field(default_factory=list)


@dataclass
class GPPerformance:
    investor_id: str
    name: str
    management_fees: float = 0.0
    carried_interest: float = 0.0

    @property
    def total_earnings(self) -> float:
        return self.management_fees + self.carried_interest


@dataclass
class SummaryMetrics:
    total_lp_distributions: float = 0.0
    total_lp_allocated: float = 0.0
    total_gp_earnings: float = 0.0
    total_gp_carried_interest: float = 0.0
    total_gp_management_fees: float = 0.0
    overall_lp_moic: float = 0.0


@dataclass
class CumulativeReturnPoint:
    year: int
    projected: float = 0.0
    valuation: Optional[float] = None   # None = no actual returns modeled


@dataclass
class CalculationOutput:
    """Results for one scenario (projected or valuation)."""
    summary_metrics: SummaryMetrics
    yearly_breakdown: List[YearlyBreakdownRow] = field(default_factory=list)
    annual_tier_chart: List[AnnualTierRow] = field(default_factory=list)
    cumulative_tier_chart: List[AnnualTierRow] = field(default_factory=list)
    lp_performance: List[LPPerformance] = field(default_factory=list)
    gp_performance: List[GPPerformance] = field(default_factory=list)
    cumulative_return_chart: List[CumulativeReturnPoint] = field(default_factory=list)
    allocations: List[TierAllocation] = field(default_factory=list)


@dataclass
class Projections:
    projected: CalculationOutput
    valuation: CalculationOutput
    cumulative_return_chart: List[CumulativeReturnPoint] = field(default_factory=list)
