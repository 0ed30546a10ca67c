import pytest

from config import DEFAULT_INVESTORS, DEFAULT_DEALS
from database import (init_database, load_investors, load_deals, save_investor, save_investors,
                      remove_investor, save_deal, remove_deal, toggle_deal_active,
                      reset_to_defaults)
from models import Investor, new_deal, new_investor


def test_init_seeds_defaults(db_path):
    assert init_database(db_path) == len(DEFAULT_INVESTORS)
    investors = load_investors(db_path)
    deals = load_deals(db_path)
    assert [i.id for i in investors] == [d["id"] for d in DEFAULT_INVESTORS]
    assert [d.to_dict() for d in deals] == [d for d in DEFAULT_DEALS]


def test_init_is_idempotent(db_path):
    init_database(db_path)
    save_investor(Investor(id="x", name="Extra"), db_path)
    assert init_database(db_path) == len(DEFAULT_INVESTORS) + 1


def test_init_without_seed(db_path):
    assert init_database(db_path, seed=False) == 0
    assert load_deals(db_path) == []


def test_save_investor_updates_in_place(db_path):
    init_database(db_path)
    investors = load_investors(db_path)
    investors[0].name = "Renamed"
    investors[0].carry_percentage = 60.0
    save_investor(investors[0], db_path)

    reloaded = load_investors(db_path)
    assert reloaded[0].name == "Renamed"
    assert reloaded[0].carry_percentage == 60.0
    assert len(reloaded) == len(DEFAULT_INVESTORS)


def test_new_investor_appended_last(db_path):
    init_database(db_path)
    inv = new_investor(False, load_investors(db_path))
    save_investor(inv, db_path)
    reloaded = load_investors(db_path)
    assert reloaded[-1].id == inv.id
    assert reloaded[-1].name == "New LP 3"


def test_remove_investor_cascades_to_deals(db_path):
    init_database(db_path)
    remove_investor("lp2", db_path)
    assert "lp2" not in [i.id for i in load_investors(db_path)]
    deal = load_deals(db_path)[0]
    assert [p.investor_id for p in deal.participants] == ["lp1"]


def test_save_investors_replaces_and_cascades(db_path):
    init_database(db_path)
    investors = [i for i in load_investors(db_path) if i.id != "lp1"]
    investors.reverse()
    save_investors(investors, db_path)

    reloaded = load_investors(db_path)
    assert [i.id for i in reloaded] == [i.id for i in investors]
    assert [p.investor_id for p in load_deals(db_path)[0].participants] == ["lp2"]


def test_deal_round_trip(db_path, deal_factory):
    init_database(db_path, seed=False)
    deal = deal_factory(deal_id="rt", timeline_years=3, actual_annual_returns=[1.5, None, -2.0],
                        catch_up=False, first_split=(70.0, 30.0))
    save_deal(deal, db_path)
    assert load_deals(db_path)[0].to_dict() == deal.to_dict()


def test_save_deal_update_and_order(db_path):
    init_database(db_path)
    deals = load_deals(db_path)
    added = new_deal(deals)
    save_deal(added, db_path)

    deals[0].name = "Renamed"
    save_deal(deals[0], db_path)

    reloaded = load_deals(db_path)
    assert [d.id for d in reloaded] == ["deal1", added.id]
    assert reloaded[0].name == "Renamed"
    assert reloaded[1].actual_annual_returns == [None] * 5


def test_toggle_deal_active(db_path):
    init_database(db_path)
    assert toggle_deal_active("deal1", db_path) is False
    assert load_deals(db_path)[0].is_active is False
    assert toggle_deal_active("deal1", db_path) is True
    assert toggle_deal_active("missing", db_path) is None


def test_remove_deal(db_path):
    init_database(db_path)
    remove_deal("deal1", db_path)
    assert load_deals(db_path) == []


def test_reset_to_defaults(db_path):
    init_database(db_path)
    remove_deal("deal1", db_path)
    remove_investor("gp1", db_path)
    reset_to_defaults(db_path)
    assert len(load_investors(db_path)) == len(DEFAULT_INVESTORS)
    assert [d.id for d in load_deals(db_path)] == ["deal1"]


def test_save_investor_error_is_raised(db_path):
    init_database(db_path)
    with pytest.raises(Exception):
        save_investor(Investor(id="bad", name=None), db_path)
