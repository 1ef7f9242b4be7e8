from __future__ import annotations

import pytest

from conftest import ScriptedRandom
from models.player import BattleMode, Currency, HeroClass
from services.battle.models import Rewards
from services.errors import ClassChangeUnavailable, InvalidClass
from services.progress import (
    apply_battle_outcome,
    change_class,
    grant_rewards,
    try_level_up,
    unlock_class_change,
    xp_required_for,
)


def test_xp_curve():
    assert xp_required_for(1) == 100
    assert xp_required_for(7) == 700


def test_level_up_discards_remainder(make_player):
    player = make_player(experience=150)

    assert try_level_up(player, ScriptedRandom([0.0])) is True
    assert player.level == 2
    assert player.experience == 0
    assert player.hero.health == 606


def test_level_up_below_threshold(make_player):
    player = make_player(experience=99)

    assert try_level_up(player, ScriptedRandom([0.0])) is False
    assert player.level == 1
    assert player.experience == 99


def test_level_up_is_monotonic(make_player):
    player = make_player()
    rng = ScriptedRandom([0.3])

    for gain in (40, 90, 250, 0, 399, 1000, 5):
        before = player.level
        player.experience += gain
        try_level_up(player, rng)
        assert player.level >= before
        assert player.experience < player.level * 100


def test_level_up_keeps_class(make_player):
    player = make_player(hero_class=HeroClass.MAGE, experience=100)

    try_level_up(player, ScriptedRandom([0.0]))
    assert player.hero.hero_class is HeroClass.MAGE
    assert player.hero.crit_chance == 5


def test_class_change_unlocks_once_at_level_three(make_player):
    player = make_player(level=3)

    assert unlock_class_change(player) is True
    assert player.hero.class_change_available is True
    assert unlock_class_change(player) is False

    other = make_player(level=4)
    assert unlock_class_change(other) is False


def test_change_class_consumes_flag(make_player):
    player = make_player(level=3)
    player.hero.class_change_available = True

    change_class(player, "mage", ScriptedRandom([0.0]))

    assert player.hero.hero_class is HeroClass.MAGE
    assert player.hero.class_change_available is False
    assert player.hero.crit_chance == 5

    with pytest.raises(ClassChangeUnavailable):
        change_class(player, "warrior", ScriptedRandom([0.0]))


def test_change_class_validates_class_first(make_player):
    player = make_player()

    with pytest.raises(InvalidClass):
        change_class(player, "necromancer", ScriptedRandom([0.0]))
    with pytest.raises(ClassChangeUnavailable):
        change_class(player, "archer", ScriptedRandom([0.0]))


def test_battle_outcome_counters(make_player):
    player = make_player()

    apply_battle_outcome(player, BattleMode.PVE, True)
    apply_battle_outcome(player, BattleMode.PVE, True)
    assert player.stats.pve.win_streak == 2

    apply_battle_outcome(player, BattleMode.PVE, False)
    assert (player.stats.pve.battles, player.stats.pve.wins, player.stats.pve.losses) == (3, 2, 1)
    assert player.stats.pve.win_streak == 0
    assert player.stats.pvp.battles == 0


def test_grant_rewards(make_player):
    player = make_player(coins=10)

    grant_rewards(player, Rewards(coins=50, experience=25, arena_rating=15))

    assert player.balance(Currency.COINS) == 60
    assert player.experience == 25
    assert player.arena_rating == 1015
