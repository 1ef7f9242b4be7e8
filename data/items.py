# data/items.py
from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, Field

from models.player import Currency

# Типи товарів магазину:
#   ticket - поповнює лічильник квитків
#   boost  - окремий предмет в інвентарі (можна продати / виставити на ринок)


class ShopItem(BaseModel):
    id: str
    name: str
    type: str
    quantity: int = 1
    price: Dict[Currency, int] = Field(default_factory=dict)

    @property
    def base_price(self) -> int:
        # ціна для швидкого продажу рахується від ціни в монетах
        return int(self.price.get(Currency.COINS, 0))


SHOP_ITEMS: Dict[str, ShopItem] = {
    "ticket_pack": ShopItem(
        id="ticket_pack",
        name="🎫 Ticket pack",
        type="ticket",
        quantity=5,
        price={Currency.PREMIUM: 10, Currency.COINS: 200},
    ),
    "energy_refill": ShopItem(
        id="energy_refill",
        name="⚡ Energy refill",
        type="boost",
        price={Currency.PREMIUM: 5, Currency.COINS: 100},
    ),
    "attack_boost": ShopItem(
        id="attack_boost",
        name="💪 Attack boost",
        type="boost",
        price={Currency.COINS: 150},
    ),
}

# скіни не продаються в магазині, base_price - ціна для швидкого продажу
SKINS: Dict[str, Dict[str, object]] = {
    "default": {"name": "Default skin", "base_price": 0},
}

DEFAULT_SKIN = "default"


def get_shop_item(item_id: str) -> Optional[ShopItem]:
    return SHOP_ITEMS.get(item_id)
