# routers/shop.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from data.items import SHOP_ITEMS, ShopItem
from routers.deps import UserRequest, get_registry
from services.registry import PlayerRegistry, ShopPurchase

router = APIRouter(prefix="/api/shop", tags=["shop"])


class ShopItemsResponse(BaseModel):
    items: List[ShopItem]


class PurchaseRequest(UserRequest):
    item_id: str
    currency: str = "coins"


@router.get("/items", response_model=ShopItemsResponse)
def list_shop_items() -> ShopItemsResponse:
    return ShopItemsResponse(items=list(SHOP_ITEMS.values()))


@router.post("/purchase", response_model=ShopPurchase)
def purchase(
    body: PurchaseRequest,
    registry: PlayerRegistry = Depends(get_registry),
) -> ShopPurchase:
    return registry.purchase_shop_item(body.user_id, body.item_id, body.currency)
