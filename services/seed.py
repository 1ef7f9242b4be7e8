# services/seed.py
from __future__ import annotations

from typing import Any, Dict, List

from loguru import logger

from models.player import HeroClass, Player
from services.progress import build_hero
from services.registry import PlayerRegistry

# демо-гравці для порожнього лідерборду
DEMO_PLAYERS: List[Dict[str, Any]] = [
    {"id": "1001", "username": "DragonSlayer", "level": 25, "hero_class": HeroClass.WARRIOR, "arena_rating": 2450},
    {"id": "1002", "username": "ShadowNinja", "level": 23, "hero_class": HeroClass.MAGE, "arena_rating": 2310},
    {"id": "1003", "username": "MageMaster", "level": 22, "hero_class": HeroClass.ARCHER, "arena_rating": 2285},
]


def _apply_demo(registry: PlayerRegistry, demo: Dict[str, Any]):
    def customize(player: Player) -> None:
        player.level = demo["level"]
        player.arena_rating = demo["arena_rating"]
        player.hero = build_hero(player.level, demo["hero_class"], registry.rng)

        player.stats.pve.wins = player.stats.pve.battles = demo["arena_rating"] // 15
        player.stats.pvp.wins = player.stats.pvp.battles = demo["arena_rating"] // 20

    return customize


def seed_demo_players(registry: PlayerRegistry) -> int:
    """Додає відсутніх демо-гравців. Повертає скільки створено."""
    created = 0
    for demo in DEMO_PLAYERS:
        if registry.create_player_if_absent(demo["id"], demo["username"], _apply_demo(registry, demo)):
            created += 1

    if created:
        logger.info(f"seed: demo players created: {created}")
    return created
