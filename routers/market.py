# routers/market.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from routers.deps import UserRequest, get_registry
from services.market.models import MarketListing
from services.registry import ListingOutcome, MarketSale, PlayerRegistry, QuickSale

router = APIRouter(prefix="/api/market", tags=["market"])


# ─────────────────────────────────────────────
# MODELS
# ─────────────────────────────────────────────
class ListingsResponse(BaseModel):
    listings: List[MarketListing]


class ListItemRequest(UserRequest):
    item_uid: str
    price: int
    currency: str = "coins"


class BuyRequest(UserRequest):
    listing_id: int


class QuickSellRequest(UserRequest):
    item_uid: str


# ─────────────────────────────────────────────
# ENDPOINTS
# ─────────────────────────────────────────────
@router.get("/listings", response_model=ListingsResponse)
def get_listings(registry: PlayerRegistry = Depends(get_registry)) -> ListingsResponse:
    return ListingsResponse(listings=registry.active_listings())


@router.post("/list", response_model=ListingOutcome)
def list_item(
    body: ListItemRequest,
    registry: PlayerRegistry = Depends(get_registry),
) -> ListingOutcome:
    return registry.list_market_item(body.user_id, body.item_uid, body.price, body.currency)


@router.post("/buy", response_model=MarketSale)
def buy(
    body: BuyRequest,
    registry: PlayerRegistry = Depends(get_registry),
) -> MarketSale:
    """Покупець платить price, продавцю йде price мінус 5% комісії."""
    return registry.buy_market_item(body.user_id, body.listing_id)


@router.post("/quick-sell", response_model=QuickSale)
def quick_sell(
    body: QuickSellRequest,
    registry: PlayerRegistry = Depends(get_registry),
) -> QuickSale:
    return registry.quick_sell_item(body.user_id, body.item_uid)
