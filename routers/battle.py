# routers/battle.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from routers.deps import UserRequest, get_registry
from services.battle.models import Battle
from services.registry import (
    AutoBattleOutcome,
    BattleSettlement,
    BattleStart,
    MoveOutcome,
    PlayerRegistry,
)

router = APIRouter(prefix="/battle", tags=["battle"])


# ===========================
# MODELS
# ===========================
class BattleStartRequest(UserRequest):
    difficulty: str = "medium"
    mode: str = "pve"


class InteractiveStartRequest(UserRequest):
    opponent_type: str = "bot"
    difficulty: str = "medium"


class BattleMoveRequest(BaseModel):
    battle_id: int
    move: str


class BattleFinishRequest(UserRequest):
    battle_id: int


# ===========================
# ENDPOINTS
# ===========================
@router.post("/start", response_model=AutoBattleOutcome)
def start_battle(
    body: BattleStartRequest,
    registry: PlayerRegistry = Depends(get_registry),
) -> AutoBattleOutcome:
    """Авто-бій: списує 1 наснагу, симулює до 5 раундів і одразу дає нагороди."""
    return registry.start_auto_battle(body.user_id, body.difficulty, body.mode)


@router.post("/interactive/start", response_model=BattleStart)
def start_interactive(
    body: InteractiveStartRequest,
    registry: PlayerRegistry = Depends(get_registry),
) -> BattleStart:
    return registry.start_interactive_battle(body.user_id, body.opponent_type, body.difficulty)


@router.post("/move", response_model=MoveOutcome)
def make_move(
    body: BattleMoveRequest,
    registry: PlayerRegistry = Depends(get_registry),
) -> MoveOutcome:
    return registry.submit_move(body.battle_id, body.move)


@router.post("/finish", response_model=BattleSettlement)
def finish_battle(
    body: BattleFinishRequest,
    registry: PlayerRegistry = Depends(get_registry),
) -> BattleSettlement:
    """
    Закриває покроковий бій і нараховує нагороди.
    Якщо бій ще активний - це здача (поразка).
    """
    return registry.finish_battle(body.battle_id, body.user_id)


@router.get("/{battle_id}", response_model=Battle)
def get_battle(
    battle_id: int,
    registry: PlayerRegistry = Depends(get_registry),
) -> Battle:
    return registry.get_battle(battle_id)
