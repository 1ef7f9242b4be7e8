from __future__ import annotations

import pytest

from conftest import T0
from data.items import SHOP_ITEMS
from models.player import Currency
from services.errors import (
    InsufficientFunds,
    InvalidCurrency,
    InvalidPrice,
    ItemNotOwned,
    ListingNotFound,
    OwnListing,
)
from services.inventory.service import give_item, make_boost
from services.market.models import ListingStatus
from services.market.service import buy_item, commission_for, list_item, quick_sell


@pytest.fixture
def seller(make_player):
    player = make_player("seller", coins=0)
    give_item(player, make_boost("itm1", SHOP_ITEMS["attack_boost"]))
    return player


def test_commission_invariant():
    for price in range(1, 2001):
        commission = commission_for(price)
        assert commission == price * 5 // 100
        assert 0 <= commission < price


def test_list_moves_item_out_of_inventory(seller):
    listing = list_item(seller, "itm1", 120, "coins", 1, T0)

    assert listing.is_listed
    assert listing.item.uid == "itm1"
    assert seller.inventory.find("itm1") is None


def test_list_missing_item_leaves_inventory(seller):
    before = seller.inventory.model_copy(deep=True)

    with pytest.raises(ItemNotOwned):
        list_item(seller, "itm404", 120, "coins", 1, T0)
    assert seller.inventory == before


@pytest.mark.parametrize("price", [0, -5, 1.5, "10", True])
def test_list_rejects_bad_price(seller, price):
    with pytest.raises(InvalidPrice):
        list_item(seller, "itm1", price, "coins", 1, T0)
    assert seller.inventory.find("itm1") is not None


def test_list_rejects_unknown_currency(seller):
    with pytest.raises(InvalidCurrency):
        list_item(seller, "itm1", 10, "gems", 1, T0)


def test_buy_with_exact_balance(seller, make_player):
    buyer = make_player("buyer", coins=100)
    listing = list_item(seller, "itm1", 100, "coins", 1, T0)

    seller_credit, commission = buy_item(buyer, seller, listing, T0)

    assert (seller_credit, commission) == (95, 5)
    assert seller_credit + commission == listing.price
    assert buyer.balance(Currency.COINS) == 0
    assert seller.balance(Currency.COINS) == 95
    assert buyer.inventory.find("itm1") is not None
    assert seller.inventory.find("itm1") is None
    assert listing.status is ListingStatus.SOLD
    assert (listing.buyer_id, listing.sold_at, listing.commission) == ("buyer", T0, 5)


def test_buy_sold_listing(seller, make_player):
    listing = list_item(seller, "itm1", 50, "coins", 1, T0)
    buy_item(make_player("b1", coins=50), seller, listing, T0)

    late = make_player("b2", coins=500)
    with pytest.raises(ListingNotFound):
        buy_item(late, seller, listing, T0)
    assert late.balance(Currency.COINS) == 500
    assert late.inventory.items == []


def test_buy_without_funds_changes_nothing(seller, make_player):
    buyer = make_player("buyer", coins=99)
    listing = list_item(seller, "itm1", 100, "coins", 1, T0)

    with pytest.raises(InsufficientFunds):
        buy_item(buyer, seller, listing, T0)
    assert buyer.balance(Currency.COINS) == 99
    assert seller.balance(Currency.COINS) == 0
    assert listing.is_listed


def test_cannot_buy_own_listing(seller):
    seller.currencies[Currency.COINS] = 1000
    listing = list_item(seller, "itm1", 100, "coins", 1, T0)

    with pytest.raises(OwnListing):
        buy_item(seller, seller, listing, T0)
    assert listing.is_listed


def test_premium_listing(seller, make_player):
    buyer = make_player("buyer", coins=0, premium=40)
    listing = list_item(seller, "itm1", 40, "premium", 1, T0)

    assert buy_item(buyer, seller, listing, T0) == (38, 2)
    assert seller.balance(Currency.PREMIUM) == 38


def test_quick_sell(seller):
    item, gain = quick_sell(seller, "itm1")

    assert item.item_id == "attack_boost"
    assert gain == 120  # 80% від 150
    assert seller.balance(Currency.COINS) == 120

    with pytest.raises(ItemNotOwned):
        quick_sell(seller, "itm1")
