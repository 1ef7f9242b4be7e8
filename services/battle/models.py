# services/battle/models.py
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from models.player import BattleMode, HeroStats


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Move(str, Enum):
    ATTACK = "attack"
    DEFEND = "defend"
    SPECIAL = "special"


class BattleProtocol(str, Enum):
    AUTO = "auto"
    INTERACTIVE = "interactive"


class BattleStatus(str, Enum):
    ACTIVE = "active"
    FINISHED = "finished"


class Side(str, Enum):
    PLAYER = "player"
    ENEMY = "enemy"


class Rewards(BaseModel):
    coins: int = 0
    experience: int = 0
    arena_rating: int = 0


class RoundResult(BaseModel):
    round: int
    player_move: Optional[Move] = None
    enemy_move: Optional[Move] = None
    player_damage: int
    enemy_damage: int
    player_crit: bool = False
    player_hp: int
    enemy_hp: int


class BattleResult(BaseModel):
    win: bool
    winner: Side
    final_player_hp: int
    final_enemy_hp: int
    forfeit: bool = False


class Battle(BaseModel):
    id: int
    owner_id: str
    protocol: BattleProtocol
    mode: BattleMode = BattleMode.PVE
    difficulty: Difficulty = Difficulty.MEDIUM
    opponent_kind: str = "bot"

    status: BattleStatus = BattleStatus.ACTIVE
    current_round: int = 1
    round_cap: int
    rounds: List[RoundResult] = Field(default_factory=list)

    player_hp: int
    player_max_hp: int
    enemy_hp: int
    enemy_max_hp: int
    # заряди спецприйому ("energy" сторони в бою)
    player_charges: int = 0
    enemy_charges: int = 0

    # знімок героя на момент старту бою
    hero: HeroStats
    player_level: int = 1

    result: Optional[BattleResult] = None
    rewards: Optional[Rewards] = None
    settled: bool = False

    created_at: datetime
    finished_at: Optional[datetime] = None

    @property
    def is_finished(self) -> bool:
        return self.status is BattleStatus.FINISHED
