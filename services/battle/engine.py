# services/battle/engine.py
from __future__ import annotations

import math
import random
from datetime import datetime
from typing import Any, Dict, Tuple

from models.player import BattleMode, HeroStats
from services.battle.models import (
    Battle,
    BattleProtocol,
    BattleResult,
    BattleStatus,
    Difficulty,
    Move,
    RoundResult,
    Side,
)
from services.errors import BattleAlreadyFinished, InvalidMove, NoSpecialCharges

AUTO_ROUND_CAP = 5
INTERACTIVE_ROUND_CAP = 3
SPECIAL_CHARGES = 3

CRIT_MULT = 1.5
# частка вхідного урону, що проходить крізь захист
DEFEND_FACTOR = 0.25
SPECIAL_MULT_MIN = 1.5
SPECIAL_MULT_SPAN = 0.5

BOT_LOW_HP_PCT = 0.30
BOT_DEFEND_CHANCE = 0.30
BOT_SPECIAL_CHANCE = 0.50

# множник шансів defend/special бота (medium = базові шанси)
BOT_CHANCE_MULT: Dict[Difficulty, float] = {
    Difficulty.EASY: 0.6,
    Difficulty.MEDIUM: 1.0,
    Difficulty.HARD: 1.3,
}

ENEMY_BASE_HP: Dict[Difficulty, int] = {
    Difficulty.EASY: 400,
    Difficulty.MEDIUM: 600,
    Difficulty.HARD: 800,
}

ENEMY_DAMAGE_MULT: Dict[Difficulty, float] = {
    Difficulty.EASY: 0.7,
    Difficulty.MEDIUM: 1.0,
    Difficulty.HARD: 1.3,
}
ENEMY_BASE_DAMAGE = 40
ENEMY_DAMAGE_SPREAD = 20


# ===========================
# ROLLS
# усі кидки йдуть через rng.random(), щоб бій можна було відтворити
# ===========================
def enemy_health(difficulty: Difficulty, level: int) -> int:
    return math.floor(ENEMY_BASE_HP[Difficulty(difficulty)] * (1 + (max(1, level) - 1) * 0.1))


def roll_hero_damage(hero: HeroStats, rng: random.Random, self_dodge: bool = False) -> Tuple[int, bool]:
    """
    uniform(min, max) × крит.
    self_dodge: в авто-бою ухилення кидається від ВЛАСНОГО dodge героя,
    тож спритний герой іноді сам не влучає. Так працює авто-бій, не чіпати
    без окремого рішення.
    """
    base = rng.random() * (hero.max_attack - hero.min_attack) + hero.min_attack
    crit = rng.random() * 100 < hero.crit_chance
    mult = CRIT_MULT if crit else 1.0

    gate = 1
    if self_dodge and rng.random() * 100 < hero.dodge:
        gate = 0

    return math.floor(base * mult * gate), crit


def roll_enemy_damage(difficulty: Difficulty, rng: random.Random) -> int:
    base = ENEMY_BASE_DAMAGE * ENEMY_DAMAGE_MULT[Difficulty(difficulty)]
    return math.floor(base + rng.random() * ENEMY_DAMAGE_SPREAD)


def roll_special_mult(rng: random.Random) -> float:
    return SPECIAL_MULT_MIN + rng.random() * SPECIAL_MULT_SPAN


def parse_move(value: Any) -> Move:
    try:
        return Move(value)
    except ValueError:
        raise InvalidMove(f"unknown move: {value!r}")


# ===========================
# BATTLE LIFECYCLE
# ===========================
def new_battle(
    battle_id: int,
    owner_id: str,
    hero: HeroStats,
    level: int,
    protocol: BattleProtocol,
    mode: BattleMode,
    difficulty: Difficulty,
    now: datetime,
    opponent_kind: str = "bot",
) -> Battle:
    snapshot = HeroStats(**{k: getattr(hero, k) for k in HeroStats.model_fields})
    enemy_hp = enemy_health(difficulty, level)
    cap = AUTO_ROUND_CAP if protocol is BattleProtocol.AUTO else INTERACTIVE_ROUND_CAP

    return Battle(
        id=battle_id,
        owner_id=owner_id,
        protocol=protocol,
        mode=mode,
        difficulty=difficulty,
        opponent_kind=opponent_kind,
        round_cap=cap,
        player_hp=snapshot.health,
        player_max_hp=snapshot.health,
        enemy_hp=enemy_hp,
        enemy_max_hp=enemy_hp,
        player_charges=SPECIAL_CHARGES,
        enemy_charges=SPECIAL_CHARGES,
        hero=snapshot,
        player_level=level,
        created_at=now,
    )


def decide_winner(battle: Battle) -> Side:
    if battle.enemy_hp <= 0:
        return Side.PLAYER
    if battle.player_hp <= 0:
        return Side.ENEMY
    if battle.protocol is BattleProtocol.AUTO:
        # авто-бій виграно лише якщо ворог упав
        return Side.ENEMY

    # ліміт раундів у покроковому бою: у кого більша частка HP
    player_frac = battle.player_hp / max(1, battle.player_max_hp)
    enemy_frac = battle.enemy_hp / max(1, battle.enemy_max_hp)
    return Side.PLAYER if player_frac > enemy_frac else Side.ENEMY


def finish(battle: Battle, now: datetime, forfeit: bool = False) -> BattleResult:
    """active → finished, рівно один раз."""
    if battle.is_finished:
        raise BattleAlreadyFinished(f"battle {battle.id} is already finished")

    winner = Side.ENEMY if forfeit else decide_winner(battle)
    battle.status = BattleStatus.FINISHED
    battle.finished_at = now
    battle.result = BattleResult(
        win=winner is Side.PLAYER,
        winner=winner,
        final_player_hp=battle.player_hp,
        final_enemy_hp=battle.enemy_hp,
        forfeit=forfeit,
    )
    return battle.result


def _close_round(battle: Battle, rr: RoundResult, now: datetime) -> None:
    battle.rounds.append(rr)

    if battle.player_hp <= 0 or battle.enemy_hp <= 0 or battle.current_round >= battle.round_cap:
        finish(battle, now)
    else:
        battle.current_round += 1


# ===========================
# A. AUTO-RESOLVE
# ===========================
def run_auto_battle(battle: Battle, rng: random.Random, now: datetime) -> BattleResult:
    if battle.is_finished:
        raise BattleAlreadyFinished(f"battle {battle.id} is already finished")

    while not battle.is_finished:
        player_damage, crit = roll_hero_damage(battle.hero, rng, self_dodge=True)
        battle.enemy_hp = max(0, battle.enemy_hp - player_damage)

        enemy_damage = 0
        if battle.enemy_hp > 0:
            enemy_damage = roll_enemy_damage(battle.difficulty, rng)
            battle.player_hp = max(0, battle.player_hp - enemy_damage)

        _close_round(
            battle,
            RoundResult(
                round=battle.current_round,
                player_damage=player_damage,
                enemy_damage=enemy_damage,
                player_crit=crit,
                player_hp=battle.player_hp,
                enemy_hp=battle.enemy_hp,
            ),
            now,
        )

    return battle.result


# ===========================
# B. TURN-BY-TURN
# ===========================
def choose_bot_move(battle: Battle, rng: random.Random) -> Move:
    """
    Низьке HP -> інколи defend; є заряди -> інколи special; інакше
    рівно attack або defend (special тут не випадає, він лише з зарядів).
    Складніший бот частіше захищається і б'є спецприйомом.
    """
    mult = BOT_CHANCE_MULT[Difficulty(battle.difficulty)]

    low_hp = battle.enemy_hp < battle.enemy_max_hp * BOT_LOW_HP_PCT
    if low_hp and rng.random() < BOT_DEFEND_CHANCE * mult:
        return Move.DEFEND
    if battle.enemy_charges > 0 and rng.random() < BOT_SPECIAL_CHANCE * mult:
        return Move.SPECIAL

    options = (Move.ATTACK, Move.DEFEND)
    return options[min(len(options) - 1, int(rng.random() * len(options)))]


def resolve_round(battle: Battle, move: Any, rng: random.Random, now: datetime) -> RoundResult:
    """
    Один раунд: хід гравця + хід бота, урон одночасний.
    attack - базовий урон, special - ×1.5..2 і мінус заряд, defend - 0 урону,
    але вхідний урон по тому, хто захищається, × DEFEND_FACTOR.
    """
    if battle.is_finished:
        raise BattleAlreadyFinished(f"battle {battle.id} is already finished")

    move = parse_move(move)
    if move is Move.SPECIAL and battle.player_charges <= 0:
        raise NoSpecialCharges("no special charges left")

    enemy_move = choose_bot_move(battle, rng)

    player_out, crit = 0, False
    if move is not Move.DEFEND:
        player_out, crit = roll_hero_damage(battle.hero, rng)
        if move is Move.SPECIAL:
            player_out = math.floor(player_out * roll_special_mult(rng))
            battle.player_charges -= 1

    enemy_out = 0
    if enemy_move is not Move.DEFEND:
        enemy_out = roll_enemy_damage(battle.difficulty, rng)
        if enemy_move is Move.SPECIAL:
            enemy_out = math.floor(enemy_out * roll_special_mult(rng))
            battle.enemy_charges -= 1

    if enemy_move is Move.DEFEND:
        player_out = math.floor(player_out * DEFEND_FACTOR)
    if move is Move.DEFEND:
        enemy_out = math.floor(enemy_out * DEFEND_FACTOR)

    battle.enemy_hp = max(0, battle.enemy_hp - player_out)
    battle.player_hp = max(0, battle.player_hp - enemy_out)

    rr = RoundResult(
        round=battle.current_round,
        player_move=move,
        enemy_move=enemy_move,
        player_damage=player_out,
        enemy_damage=enemy_out,
        player_crit=crit,
        player_hp=battle.player_hp,
        enemy_hp=battle.enemy_hp,
    )
    _close_round(battle, rr, now)
    return rr
