import pytest

from config import DEFAULT_INVESTORS, DEFAULT_DEALS
from models import (Investor, Deal, Participant, GPCatchUp, FirstTier, SecondTier,
                    TierSplit)


def make_deal(
    deal_id="d1",
    participants=(("lp1", 1_000_000.0),),
    timeline_years=1,
    management_fee=0.0,
    preferred_return=8.0,
    projected_annual_return=20.0,
    actual_annual_returns=None,
    catch_up=True,
    catch_up_pct=100.0,
    catch_up_hurdle=10.0,
    first_split=(80.0, 20.0),
    first_hurdle=15.0,
    second_split=(60.0, 40.0),
    is_active=True,
):
    return Deal(
        id=deal_id,
        name=f"Deal {deal_id}",
        is_active=is_active,
        timeline_years=timeline_years,
        management_fee=management_fee,
        preferred_return=preferred_return,
        projected_annual_return=projected_annual_return,
        actual_annual_returns=list(actual_annual_returns or [None] * timeline_years),
        participants=[Participant(investor_id=i, amount=a) for i, a in participants],
        gp_catch_up=GPCatchUp(applies=catch_up, percentage=catch_up_pct, hurdle=catch_up_hurdle),
        first_tier=FirstTier(split=TierSplit(lp=first_split[0], gp=first_split[1]), hurdle=first_hurdle),
        second_tier=SecondTier(split=TierSplit(lp=second_split[0], gp=second_split[1])),
    )


@pytest.fixture
def deal_factory():
    return make_deal


@pytest.fixture
def investors():
    return [
        Investor(id="gp1", name="GP One", is_gp=True, carry_percentage=75.0),
        Investor(id="gp2", name="GP Two", is_gp=True, carry_percentage=25.0),
        Investor(id="lp1", name="LP One", commitment=1_000_000.0),
        Investor(id="lp2", name="LP Two", commitment=500_000.0),
    ]


@pytest.fixture
def default_investors():
    return [Investor.from_dict(d) for d in DEFAULT_INVESTORS]


@pytest.fixture
def default_deals():
    return [Deal.from_dict(d) for d in DEFAULT_DEALS]


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "test.db")
