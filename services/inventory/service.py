# services/inventory/service.py
from __future__ import annotations

from data.items import SKINS, ShopItem
from models.player import InventoryItem, Player
from services.errors import ItemNotOwned


def make_boost(uid: str, shop_item: ShopItem) -> InventoryItem:
    return InventoryItem(
        uid=uid,
        item_id=shop_item.id,
        kind="boost",
        name=shop_item.name,
        base_price=shop_item.base_price,
    )


def make_skin(uid: str, skin_id: str) -> InventoryItem:
    skin = SKINS[skin_id]
    return InventoryItem(
        uid=uid,
        item_id=skin_id,
        kind="skin",
        name=str(skin["name"]),
        base_price=int(skin["base_price"]),
    )


def give_item(player: Player, item: InventoryItem) -> None:
    player.inventory.items.append(item)


def take_item(player: Player, uid: str) -> InventoryItem:
    """
    Забрати конкретний екземпляр з інвентаря (по стабільному uid).
    Нема - ItemNotOwned, інвентар не змінюється.
    """
    items = player.inventory.items
    for idx, item in enumerate(items):
        if item.uid == uid:
            return items.pop(idx)

    raise ItemNotOwned(f"item {uid!r} is not in inventory of {player.id}")
