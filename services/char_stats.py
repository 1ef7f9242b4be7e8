from __future__ import annotations

import math
import random
from typing import Any, Dict

from models.player import HeroClass, HeroStats
from services.errors import InvalidClass

# ---------------------------------------------------------------------
# БАЗОВІ СТАТИ (рівень 1, клас "wanderer")
# ---------------------------------------------------------------------

BASE_STATS: Dict[str, float] = {
    "health": 604,
    "min_attack": 50,
    "max_attack": 60,
    "armor": 2.8,
    "speed": 113,
    "crit_chance": 0,
    "dodge": 0,
}

# приріст за кожен рівень понад перший (до множників класу)
STATS_PER_LEVEL: Dict[str, float] = {
    "health": 2.6,
    "attack": 2.7,
    "armor": 0.3,
}

# одноразовий ролл швидкості, у відсотках
SPEED_JITTER_MIN = 0.70
SPEED_JITTER_SPAN = 0.98

CLASS_MODIFIERS: Dict[HeroClass, Dict[str, Any]] = {
    HeroClass.WANDERER: {
        "name": "🚶 Wanderer",
        "health": 1.0,
        "attack": 1.0,
        "armor": 1.0,
        "speed": 1.0,
        "crit_chance": 0,
        "dodge": 0,
    },
    HeroClass.WARRIOR: {
        "name": "⚔️ Warrior",
        "health": 1.08,
        "attack": 1.03,
        "armor": 1.05,
        "speed": 1.04,
        "crit_chance": 2,
        "dodge": 3,
    },
    HeroClass.MAGE: {
        "name": "🔮 Mage",
        "health": 1.03,
        "attack": 1.1,
        "armor": 1.02,
        "speed": 1.03,
        "crit_chance": 5,
        "dodge": 0,
    },
    HeroClass.ARCHER: {
        "name": "🏹 Archer",
        "health": 1.02,
        "attack": 1.06,
        "armor": 1.02,
        "speed": 1.1,
        "crit_chance": 0,
        "dodge": 5,
    },
}


def parse_hero_class(value: Any) -> HeroClass:
    """Приводить сирий ключ класу до HeroClass або кидає InvalidClass."""
    try:
        return HeroClass(value)
    except ValueError:
        raise InvalidClass(f"unknown hero class: {value!r}")


def class_name(hero_class: HeroClass) -> str:
    return CLASS_MODIFIERS[HeroClass(hero_class)]["name"]


def roll_speed_jitter(rng: random.Random) -> float:
    return SPEED_JITTER_MIN + rng.random() * SPEED_JITTER_SPAN


def jittered_speed(speed_jitter: float) -> int:
    return math.floor(BASE_STATS["speed"] * (1 + speed_jitter / 100))


def derive_stats(level: int, hero_class: HeroClass, speed_jitter: float) -> HeroStats:
    """
    Бойові стати героя як чиста функція (level, class, jitter).

    Порядок: лінійний приріст за рівень -> jitter швидкості -> множники класу.
    Усе множене округлюється вниз до цілого, броня - вниз до сотих.
    """
    if level < 1:
        raise ValueError("level must be >= 1")

    modifier = CLASS_MODIFIERS[parse_hero_class(hero_class)]
    grown = level - 1

    health = BASE_STATS["health"] + STATS_PER_LEVEL["health"] * grown
    min_attack = BASE_STATS["min_attack"] + STATS_PER_LEVEL["attack"] * grown
    max_attack = BASE_STATS["max_attack"] + STATS_PER_LEVEL["attack"] * grown
    armor = BASE_STATS["armor"] + STATS_PER_LEVEL["armor"] * grown
    speed = jittered_speed(speed_jitter)

    return HeroStats(
        health=math.floor(health * modifier["health"]),
        min_attack=math.floor(min_attack * modifier["attack"]),
        max_attack=math.floor(max_attack * modifier["attack"]),
        armor=math.floor(armor * modifier["armor"] * 100) / 100,
        speed=math.floor(speed * modifier["speed"]),
        crit_chance=int(modifier["crit_chance"]),
        dodge=int(modifier["dodge"]),
        attack_speed=round(1.5 * (100 / speed), 1),
    )
