# routers/profile.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from models.player import Player
from routers.deps import UserRequest, get_registry
from services.char_stats import class_name
from services.progress import xp_required_for
from services.registry import PlayerRegistry

router = APIRouter(prefix="/api/user", tags=["profile"])


# ─────────────────────────────────────────────
# MODELS
# ─────────────────────────────────────────────
class ProfileResponse(BaseModel):
    player: Player
    class_name: str
    xp_required: int


class ChangeClassRequest(UserRequest):
    new_class: str


def _profile(player: Player) -> ProfileResponse:
    return ProfileResponse(
        player=player,
        class_name=class_name(player.hero.hero_class),
        xp_required=xp_required_for(player.level),
    )


# ─────────────────────────────────────────────
# ENDPOINTS
# ─────────────────────────────────────────────
@router.get("/{user_id}", response_model=ProfileResponse)
def get_profile(
    user_id: str,
    username: Optional[str] = Query(default=None),
    registry: PlayerRegistry = Depends(get_registry),
) -> ProfileResponse:
    """Перший запит гравця створює його профіль."""
    return _profile(registry.get_or_create_player(user_id, username))


@router.post("/change-class", response_model=ProfileResponse)
def post_change_class(
    body: ChangeClassRequest,
    registry: PlayerRegistry = Depends(get_registry),
) -> ProfileResponse:
    return _profile(registry.change_class(body.user_id, body.new_class))
