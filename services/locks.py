# services/locks.py
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import ContextManager, Dict, Iterator, List, Protocol, Tuple

import redis
from loguru import logger
from redis.exceptions import LockError

from services.errors import RecordBusy


class Locks(Protocol):
    def hold(self, *keys: str) -> ContextManager[None]:
        ...


class KeyedLocks:
    """
    Лок на кожен запис ("player:42", "battle:7", "listing:3").

    hold() бере всі потрібні ключі в сортованому порядку, тож дві операції,
    які чіпають ті самі записи, не можуть зайти в дедлок.
    RLock - той самий потік може повторно взяти свій ключ.
    Працює в межах одного процесу (in-memory сховище).
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}

    def _lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock

    @contextmanager
    def hold(self, *keys: str) -> Iterator[None]:
        locks = [self._lock_for(k) for k in sorted(set(keys))]
        acquired: List[threading.RLock] = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


# ─────────────────────────────────────────────
# REDIS: спільні локи для кількох воркерів / процесів
# ─────────────────────────────────────────────
class RedisKeyedLocks:
    """
    Ті самі ключі й той самий сортований порядок, але лок живе в Redis
    ({prefix}:lock:{key}), тож його бачать усі процеси з тим самим REDIS_URL.

    Ключі, які потік уже тримає, повторно не беруться (аналог RLock).
    Не дочекались лока за blocking_timeout - RecordBusy.
    """

    def __init__(
        self,
        client: "redis.Redis",
        prefix: str = "pixelarena",
        timeout: float = 10.0,
        blocking_timeout: float = 5.0,
    ) -> None:
        self._r = client
        self._prefix = prefix
        self._timeout = timeout
        self._blocking_timeout = blocking_timeout
        self._local = threading.local()

    def _held(self) -> Dict[str, int]:
        held = getattr(self._local, "held", None)
        if held is None:
            held = self._local.held = {}
        return held

    def _release(self, key: str, lock) -> None:
        try:
            lock.release()
        except LockError as e:
            # TTL вийшов раніше за операцію - лок уже чужий або зник
            logger.warning(f"locks: release {key} failed: {e}")

    @contextmanager
    def hold(self, *keys: str) -> Iterator[None]:
        held = self._held()
        acquired: List[Tuple[str, object]] = []
        try:
            for key in sorted(set(keys)):
                if held.get(key):
                    held[key] += 1
                    acquired.append((key, None))
                    continue

                lock = self._r.lock(
                    f"{self._prefix}:lock:{key}",
                    timeout=self._timeout,
                    blocking_timeout=self._blocking_timeout,
                    thread_local=False,
                )
                if not lock.acquire():
                    raise RecordBusy(f"{key} is busy, try again")
                held[key] = 1
                acquired.append((key, lock))
            yield
        finally:
            for key, lock in reversed(acquired):
                held[key] -= 1
                if held[key] == 0:
                    del held[key]
                if lock is not None:
                    self._release(key, lock)
