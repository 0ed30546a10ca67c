import pytest

from config import DEFAULT_DEALS, NEW_DEAL_DEFAULTS
from models import (Deal, Investor, new_deal, new_investor, set_tier_split,
                    resize_actual_returns, TierAllocation)


def test_deal_dict_round_trip():
    d = DEFAULT_DEALS[0]
    assert Deal.from_dict(d).to_dict() == d


def test_total_investment(deal_factory):
    deal = deal_factory(participants=(("a", 100.0), ("b", 50.0)))
    assert deal.total_investment == 150.0
    assert deal.participant_amount("b") == 50.0
    assert deal.participant_amount("zzz") == 0


def test_return_for_year(deal_factory):
    deal = deal_factory(timeline_years=3, projected_annual_return=12.0,
                        actual_annual_returns=[4.0, None])
    assert deal.return_for_year(2, use_projected=True) == 12.0
    assert deal.return_for_year(1, use_projected=False) == 4.0
    assert deal.return_for_year(2, use_projected=False) == 0.0
    assert deal.return_for_year(3, use_projected=False) == 0.0


def test_new_deal_defaults():
    existing = [Deal.from_dict(DEFAULT_DEALS[0])]
    deal = new_deal(existing)
    assert deal.name == "New Deal 2"
    assert deal.id.startswith("deal_")
    assert deal.timeline_years == NEW_DEAL_DEFAULTS["timeline_years"]
    assert deal.actual_annual_returns == [None] * deal.timeline_years
    assert deal.participants == []
    assert deal.gp_catch_up.applies is True
    assert (deal.first_tier.split.lp, deal.first_tier.split.gp) == (80.0, 20.0)
    assert (deal.second_tier.split.lp, deal.second_tier.split.gp) == (60.0, 40.0)


def test_new_deal_does_not_share_defaults():
    a = new_deal([])
    a.first_tier.split.lp = 1.0
    b = new_deal([])
    assert b.first_tier.split.lp == 80.0


def test_new_investor_names():
    existing = [Investor(id="g", name="G", is_gp=True), Investor(id="l", name="L")]
    assert new_investor(True, existing).name == "New GP 2"
    assert new_investor(False, existing).name == "New LP 2"
    assert new_investor(False, existing).is_lp


def test_set_tier_split_fills_complement(deal_factory):
    deal = deal_factory()
    set_tier_split(deal.first_tier, "lp", 65.0)
    assert (deal.first_tier.split.lp, deal.first_tier.split.gp) == (65.0, 35.0)
    set_tier_split(deal.second_tier, "gp", 30.0)
    assert (deal.second_tier.split.lp, deal.second_tier.split.gp) == (70.0, 30.0)
    with pytest.raises(ValueError):
        set_tier_split(deal.first_tier, "other", 1.0)


def test_resize_actual_returns(deal_factory):
    deal = deal_factory(timeline_years=2, actual_annual_returns=[1.0, 2.0])
    deal.timeline_years = 4
    resize_actual_returns(deal)
    assert deal.actual_annual_returns == [1.0, 2.0, None, None]
    deal.timeline_years = 1
    resize_actual_returns(deal)
    assert deal.actual_annual_returns == [1.0]


def test_tier_allocation_properties():
    a = TierAllocation(year=1, deal_id="d", gp_mgmt_fee=1.0, lp_pref=2.0, gp_catch_up=3.0,
                       lp_catch_up=4.0, gp_first_tier=5.0, lp_first_tier=6.0,
                       gp_second_tier=7.0, lp_second_tier=8.0)
    assert a.gp_profit_share == 12.0
    assert a.lp_profit_share == 18.0
    assert a.gp_carry == 15.0
    assert a.total_allocated == 36.0
