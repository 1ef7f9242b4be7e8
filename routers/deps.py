# routers/deps.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from starlette.requests import Request

from services.registry import PlayerRegistry


def get_registry(request: Request) -> PlayerRegistry:
    return request.app.state.registry


class UserRequest(BaseModel):
    # Telegram шле id числом, у ядрі це непрозорий рядок
    model_config = ConfigDict(coerce_numbers_to_str=True)

    user_id: str
