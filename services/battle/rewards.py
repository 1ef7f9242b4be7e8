# services/battle/rewards.py
from __future__ import annotations

import math
from typing import Any, Dict

from services.battle.models import Difficulty, Rewards
from services.errors import InvalidDifficulty

# (перемога, поразка)
BASE_COINS = (50, 20)
BASE_EXP = (25, 10)
BASE_ARENA = (15, 5)

DIFFICULTY_REWARD_MULT: Dict[Difficulty, float] = {
    Difficulty.EASY: 0.7,
    Difficulty.MEDIUM: 1.0,
    Difficulty.HARD: 1.5,
}


def parse_difficulty(value: Any) -> Difficulty:
    try:
        return Difficulty(value)
    except ValueError:
        raise InvalidDifficulty(f"unknown difficulty: {value!r}")


def level_bonus(level: int) -> float:
    return 1 + (max(1, int(level)) - 1) * 0.1


def calc_battle_rewards(win: bool, difficulty: Difficulty, level: int) -> Rewards:
    """
    Нагороди за бій, спільні для авто- і покрокового режиму:
      floor(base(win) * difficulty_mult * level_bonus)
    """
    mult = DIFFICULTY_REWARD_MULT[parse_difficulty(difficulty)]
    bonus = level_bonus(level)
    idx = 0 if win else 1

    return Rewards(
        coins=math.floor(BASE_COINS[idx] * mult * bonus),
        experience=math.floor(BASE_EXP[idx] * mult * bonus),
        arena_rating=math.floor(BASE_ARENA[idx] * mult * bonus),
    )
