# models/player.py
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class HeroClass(str, Enum):
    WANDERER = "wanderer"
    WARRIOR = "warrior"
    MAGE = "mage"
    ARCHER = "archer"


class Currency(str, Enum):
    COINS = "coins"
    PREMIUM = "premium"


class BattleMode(str, Enum):
    PVE = "pve"
    PVP = "pvp"


class HeroStats(BaseModel):
    health: int
    min_attack: int
    max_attack: int
    armor: float
    speed: int
    crit_chance: int
    dodge: int
    attack_speed: float


class Hero(HeroStats):
    hero_class: HeroClass = HeroClass.WANDERER
    # ролл швидкості у відсотках, фіксується при перерахунку (створення / level-up / зміна класу)
    speed_jitter: float
    class_change_available: bool = False


class InventoryItem(BaseModel):
    uid: str
    item_id: str
    kind: str  # "boost" | "skin"
    name: str
    base_price: int = 0


class Inventory(BaseModel):
    tickets: int = 0
    items: List[InventoryItem] = Field(default_factory=list)

    @property
    def boosts(self) -> List[str]:
        return [i.item_id for i in self.items if i.kind == "boost"]

    @property
    def skins(self) -> List[str]:
        return [i.item_id for i in self.items if i.kind == "skin"]

    def find(self, uid: str) -> Optional[InventoryItem]:
        for item in self.items:
            if item.uid == uid:
                return item
        return None


class ModeStats(BaseModel):
    battles: int = 0
    wins: int = 0
    losses: int = 0
    win_streak: int = 0


class PlayerStats(BaseModel):
    pve: ModeStats = Field(default_factory=ModeStats)
    pvp: ModeStats = Field(default_factory=ModeStats)

    def for_mode(self, mode: BattleMode) -> ModeStats:
        return self.pve if BattleMode(mode) is BattleMode.PVE else self.pvp


class Player(BaseModel):
    id: str
    username: str
    seq: int = 0

    level: int = 1
    experience: int = 0

    currencies: Dict[Currency, int] = Field(
        default_factory=lambda: {Currency.COINS: 0, Currency.PREMIUM: 0}
    )

    energy: int = 10
    max_energy: int = 10
    energy_regen_at: datetime

    arena_rating: int = 1000

    hero: Hero
    inventory: Inventory = Field(default_factory=Inventory)
    stats: PlayerStats = Field(default_factory=PlayerStats)

    last_active_at: datetime
    joined_at: datetime

    def balance(self, currency: Currency) -> int:
        return int(self.currencies.get(Currency(currency), 0))
