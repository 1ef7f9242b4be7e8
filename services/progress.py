# services/progress.py
from __future__ import annotations

import random

from loguru import logger

from models.player import BattleMode, Currency, Hero, HeroClass, Player
from services.battle.models import Rewards
from services.char_stats import derive_stats, parse_hero_class, roll_speed_jitter
from services.errors import ClassChangeUnavailable
from services.wallet import credit

# з якого рівня відкривається (одноразова) зміна класу
CLASS_CHANGE_LEVEL = 3


# ───────────────────── КРИВА XP ─────────────────────

def xp_required_for(level: int) -> int:
    """
    Скільки XP треба, щоб перейти з цього level на наступний.
    """
    return max(1, int(level)) * 100


# ───────────────────── СТАТИ ГЕРОЯ ─────────────────────

def build_hero(
    level: int,
    hero_class: HeroClass,
    rng: random.Random,
    class_change_available: bool = False,
) -> Hero:
    """
    Перерахунок статів = нова подія, тому jitter швидкості ролиться тут
    і зберігається в герої, а не на кожне читання.
    """
    jitter = roll_speed_jitter(rng)
    stats = derive_stats(level, hero_class, jitter)
    return Hero(
        **stats.model_dump(),
        hero_class=hero_class,
        speed_jitter=jitter,
        class_change_available=class_change_available,
    )


def recompute_hero(player: Player, rng: random.Random) -> None:
    player.hero = build_hero(
        player.level,
        player.hero.hero_class,
        rng,
        class_change_available=player.hero.class_change_available,
    )


# ───────────────────── РЕЗУЛЬТАТ БОЮ ─────────────────────

def apply_battle_outcome(player: Player, mode: BattleMode, won: bool) -> None:
    stats = player.stats.for_mode(mode)
    stats.battles += 1

    if won:
        stats.wins += 1
        stats.win_streak += 1
    else:
        stats.losses += 1
        stats.win_streak = 0


def grant_rewards(player: Player, rewards: Rewards) -> None:
    """
    Тільки застосовує вже пораховані нагороди.
    Один виклик на один завершений бій - це стереже registry (battle.settled).
    """
    credit(player, Currency.COINS, rewards.coins)
    player.experience += max(0, int(rewards.experience))
    player.arena_rating += int(rewards.arena_rating)


# ───────────────────── LEVEL-UP ─────────────────────

def try_level_up(player: Player, rng: random.Random) -> bool:
    """
    Один рівень за виклик. Залишок XP понад поріг НЕ переноситься.
    """
    need = xp_required_for(player.level)
    if player.experience < need:
        return False

    player.level += 1
    player.experience = 0
    recompute_hero(player, rng)

    logger.info(f"progress: uid={player.id} level up → {player.level}")
    return True


def unlock_class_change(player: Player) -> bool:
    """
    Відкриває зміну класу, коли гравець уперше досяг CLASS_CHANGE_LEVEL.
    Рівень росте строго по одному, тож рівно CLASS_CHANGE_LEVEL буває один раз.
    """
    if player.level != CLASS_CHANGE_LEVEL or player.hero.class_change_available:
        return False
    player.hero.class_change_available = True
    return True


def change_class(player: Player, new_class: str, rng: random.Random) -> None:
    hero_class = parse_hero_class(new_class)

    if not player.hero.class_change_available:
        raise ClassChangeUnavailable("class change is not available")

    player.hero = build_hero(player.level, hero_class, rng, class_change_available=False)
    logger.info(f"progress: uid={player.id} class → {hero_class.value}")
