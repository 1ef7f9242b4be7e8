from __future__ import annotations

import pytest

from services.battle.models import Difficulty, Rewards
from services.battle.rewards import calc_battle_rewards, level_bonus, parse_difficulty
from services.errors import InvalidDifficulty


def test_medium_base_rewards():
    assert calc_battle_rewards(True, Difficulty.MEDIUM, 1) == Rewards(coins=50, experience=25, arena_rating=15)
    assert calc_battle_rewards(False, Difficulty.MEDIUM, 1) == Rewards(coins=20, experience=10, arena_rating=5)


def test_hard_multiplier_is_floored():
    assert calc_battle_rewards(True, Difficulty.HARD, 1) == Rewards(coins=75, experience=37, arena_rating=22)


def test_level_bonus():
    assert level_bonus(1) == 1.0
    assert level_bonus(11) == 2.0
    assert calc_battle_rewards(True, "medium", 11) == Rewards(coins=100, experience=50, arena_rating=30)


def test_unknown_difficulty():
    with pytest.raises(InvalidDifficulty):
        parse_difficulty("nightmare")
