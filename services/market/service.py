# services/market/service.py
from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Tuple

from models.player import Currency, InventoryItem, Player
from services.errors import InvalidPrice, ListingNotFound, OwnListing
from services.inventory.service import give_item, take_item
from services.market.models import ListingStatus, MarketListing
from services.wallet import credit, debit, parse_currency

# ─────────────────────────────────────────────
# ЛОГІКА ЦІН
# ─────────────────────────────────────────────
MARKET_COMMISSION_RATE = 0.05
QUICK_SELL_COEF = 0.8  # 80% від base_price


def commission_for(price: int) -> int:
    return math.floor(int(price) * MARKET_COMMISSION_RATE)


def quick_sell_price(item: InventoryItem) -> int:
    return math.floor(int(item.base_price) * QUICK_SELL_COEF)


def _validate_price(price: Any) -> int:
    if isinstance(price, bool) or not isinstance(price, int) or price <= 0:
        raise InvalidPrice(f"price must be a positive integer, got {price!r}")
    return price


# ─────────────────────────────────────────────
# ОПЕРАЦІЇ
# Усі функції мутують передані об'єкти; registry дає їм робочі копії
# і зберігає результат лише якщо функція не кинула помилку.
# ─────────────────────────────────────────────
def list_item(
    seller: Player,
    item_uid: str,
    price: Any,
    currency: Any,
    listing_id: int,
    now: datetime,
) -> MarketListing:
    price = _validate_price(price)
    currency = parse_currency(currency)

    item = take_item(seller, item_uid)

    return MarketListing(
        id=listing_id,
        seller_id=seller.id,
        item=item,
        price=price,
        currency=currency,
        created_at=now,
    )


def buy_item(
    buyer: Player,
    seller: Player,
    listing: MarketListing,
    now: datetime,
) -> Tuple[int, int]:
    """
    listed → sold. Покупець платить price, продавець отримує price - commission.
    Повертає (seller_credit, commission).
    """
    if not listing.is_listed:
        raise ListingNotFound(f"listing {listing.id} is already sold")
    if buyer.id == listing.seller_id:
        raise OwnListing("cannot buy your own listing")

    commission = commission_for(listing.price)
    seller_credit = listing.price - commission

    debit(buyer, listing.currency, listing.price)
    credit(seller, listing.currency, seller_credit)
    give_item(buyer, listing.item)

    listing.status = ListingStatus.SOLD
    listing.buyer_id = buyer.id
    listing.sold_at = now
    listing.commission = commission

    return seller_credit, commission


def quick_sell(owner: Player, item_uid: str) -> Tuple[InventoryItem, int]:
    """
    Продаж "віртуальному покупцю" без лістингу.
    Повертає (item, скільки монет зараховано).
    """
    item = take_item(owner, item_uid)
    gain = quick_sell_price(item)
    credit(owner, Currency.COINS, gain)
    return item, gain
