from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from routers.deps import get_registry
from services.registry import LEADERBOARD_LIMIT, LeaderboardRow, PlayerRegistry

router = APIRouter(prefix="/api", tags=["ratings"])

# ────────────────────────────────────────────────────────────
# Рейтинг арени: arena_rating DESC, при рівності - хто раніше зареєструвався
# ────────────────────────────────────────────────────────────


class LeaderboardResp(BaseModel):
    rows: List[LeaderboardRow]


@router.get("/leaderboard", response_model=LeaderboardResp)
def leaderboard(
    limit: int = Query(default=LEADERBOARD_LIMIT, ge=1, le=LEADERBOARD_LIMIT),
    registry: PlayerRegistry = Depends(get_registry),
) -> LeaderboardResp:
    return LeaderboardResp(rows=registry.get_leaderboard(limit))
