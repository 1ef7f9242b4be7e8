from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import List, Sequence, Tuple

import pytest

from models.player import Currency, HeroClass, Player
from services.progress import build_hero
from services.registry import PlayerRegistry
from services.repo import MemoryRepository

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class ScriptedRandom(random.Random):
    """random() віддає задані значення по колу."""

    def __init__(self, values: Sequence[float]):
        super().__init__(0)
        self._values = list(values)
        self._i = 0

    def random(self) -> float:
        value = self._values[self._i % len(self._values)]
        self._i += 1
        return value


class FakeClock:
    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingNotifier:
    def __init__(self):
        self.sent: List[Tuple[str, str]] = []

    def notify(self, player_id: str, text: str) -> bool:
        self.sent.append((player_id, text))
        return True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def rng() -> ScriptedRandom:
    return ScriptedRandom([0.5])


@pytest.fixture
def registry(rng, clock, notifier) -> PlayerRegistry:
    return PlayerRegistry(repo=MemoryRepository(), rng=rng, clock=clock, notifier=notifier)


@pytest.fixture
def edit_player(registry):
    """Переписує поля гравця прямо в репозиторії (для підготовки сценаріїв)."""

    def _edit(player_id: str, **fields) -> Player:
        player = registry.get_or_create_player(player_id)
        for key, value in fields.items():
            setattr(player, key, value)
        registry.repo.put("player", player.id, player.model_dump(mode="json"))
        return player

    return _edit


@pytest.fixture
def make_player(clock):
    def _make(
        player_id: str = "1",
        level: int = 1,
        hero_class: HeroClass = HeroClass.WANDERER,
        coins: int = 100,
        premium: int = 0,
        **fields,
    ) -> Player:
        now = clock()
        fields.setdefault("energy_regen_at", now)
        fields.setdefault("last_active_at", now)
        fields.setdefault("joined_at", now)
        return Player(
            id=player_id,
            username=f"Player{player_id}",
            level=level,
            currencies={Currency.COINS: coins, Currency.PREMIUM: premium},
            hero=build_hero(level, hero_class, ScriptedRandom([0.0])),
            **fields,
        )

    return _make
