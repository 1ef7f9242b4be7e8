# services/market/models.py
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from models.player import Currency, InventoryItem


class ListingStatus(str, Enum):
    LISTED = "listed"
    SOLD = "sold"


class MarketListing(BaseModel):
    id: int
    seller_id: str
    item: InventoryItem
    price: int
    currency: Currency = Currency.COINS
    status: ListingStatus = ListingStatus.LISTED

    buyer_id: Optional[str] = None
    sold_at: Optional[datetime] = None
    commission: Optional[int] = None

    created_at: datetime

    @property
    def is_listed(self) -> bool:
        return self.status is ListingStatus.LISTED
