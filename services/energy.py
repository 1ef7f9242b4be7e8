from __future__ import annotations

from datetime import datetime, timedelta
from typing import Tuple

from models.player import Player
from services.errors import InsufficientEnergy

BASE_ENERGY_MAX = 10

# +1 наснаги за кожен повний інтервал
ENERGY_REGEN_INTERVAL = timedelta(minutes=30)


def regen_energy(player: Player, now: datetime) -> int:
    """
    Лінивий реген: викликається при кожному читанні/зміні гравця.

    energy_regen_at - якір відліку. Рухаємо його тільки на цілі інтервали,
    щоб неповний інтервал не губився між запитами. На повній насназі
    якір = now (повний бак не "накопичує" реген на потім).
    Повертає скільки наснаги додано.
    """
    if player.max_energy <= 0:
        player.max_energy = BASE_ENERGY_MAX

    # захист від кривих дат (майбутнє тощо)
    if player.energy_regen_at > now:
        player.energy_regen_at = now

    if player.energy >= player.max_energy:
        player.energy = player.max_energy
        player.energy_regen_at = now
        return 0

    ticks = int((now - player.energy_regen_at) / ENERGY_REGEN_INTERVAL)
    if ticks <= 0:
        return 0

    before = player.energy
    player.energy = min(player.max_energy, player.energy + ticks)

    if player.energy >= player.max_energy:
        player.energy_regen_at = now
    else:
        player.energy_regen_at += ENERGY_REGEN_INTERVAL * ticks

    return player.energy - before


def spend_energy(player: Player, amount: int, now: datetime) -> Tuple[int, int]:
    """
    Знімає amount наснаги.
    Якщо не вистачає - InsufficientEnergy, гравець не змінюється.
    Повертає (energy_after, energy_max).
    """
    if amount <= 0:
        raise ValueError("ENERGY_AMOUNT_INVALID")

    if player.energy < amount:
        raise InsufficientEnergy(f"energy {player.energy} < {amount}")

    was_full = player.energy >= player.max_energy
    player.energy -= amount

    # відлік регену стартує з моменту, коли бак перестав бути повним
    if was_full:
        player.energy_regen_at = now

    return player.energy, player.max_energy
