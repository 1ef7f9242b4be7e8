# services/repo.py
from __future__ import annotations

import copy
import itertools
import json
import threading
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple, Union

import redis

# Сховище записів гри. Registry знає лише цей контракт:
#   get / put / put_many / values / count / next_id
# Записи - JSON-сумісні dict (model_dump(mode="json")).

JsonLike = Dict[str, Any]
RawRedis = Union[bytes, str, None]
Entry = Tuple[str, str, JsonLike]  # (kind, key, data)


class Repository(Protocol):
    def get(self, kind: str, key: str) -> Optional[JsonLike]:
        ...

    def put(self, kind: str, key: str, data: JsonLike) -> None:
        ...

    def put_many(self, entries: Iterable[Entry]) -> None:
        ...

    def values(self, kind: str) -> List[JsonLike]:
        ...

    def count(self, kind: str) -> int:
        ...

    def next_id(self, kind: str) -> int:
        ...


# ─────────────────────────────────────────────
# IN-MEMORY (за замовчуванням)
# ─────────────────────────────────────────────
class MemoryRepository:
    # один лок на все сховище, ендпоінти ходять сюди з threadpool
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tables: Dict[str, Dict[str, JsonLike]] = defaultdict(dict)
        self._counters: Dict[str, itertools.count] = {}

    def get(self, kind: str, key: str) -> Optional[JsonLike]:
        with self._lock:
            data = self._tables[kind].get(str(key))
            return copy.deepcopy(data) if data is not None else None

    def put(self, kind: str, key: str, data: JsonLike) -> None:
        snapshot = copy.deepcopy(data)
        with self._lock:
            self._tables[kind][str(key)] = snapshot

    def put_many(self, entries: Iterable[Entry]) -> None:
        staged = [(kind, str(key), copy.deepcopy(data)) for kind, key, data in entries]
        with self._lock:
            for kind, key, data in staged:
                self._tables[kind][key] = data

    def values(self, kind: str) -> List[JsonLike]:
        # dict тримає порядок вставки
        with self._lock:
            return [copy.deepcopy(v) for v in self._tables[kind].values()]

    def count(self, kind: str) -> int:
        with self._lock:
            return len(self._tables[kind])

    def next_id(self, kind: str) -> int:
        with self._lock:
            counter = self._counters.get(kind)
            if counter is None:
                counter = self._counters[kind] = itertools.count(1)
            return next(counter)


# ─────────────────────────────────────────────
# REDIS
# hash: {prefix}:{kind} -> key -> JSON
# лічильник: {prefix}:seq:{kind} -> INCR
# ─────────────────────────────────────────────
def _json_load(raw: RawRedis) -> Optional[JsonLike]:
    if raw is None:
        return None
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="ignore")
    raw = (raw or "").strip()
    if not raw:
        return None
    obj = json.loads(raw)
    return obj if isinstance(obj, dict) else None


class RedisRepository:
    def __init__(self, client: "redis.Redis", prefix: str = "pixelarena") -> None:
        self._r = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "pixelarena") -> "RedisRepository":
        client = redis.Redis.from_url(url, encoding="utf-8", decode_responses=True)
        return cls(client, prefix=prefix)

    @property
    def client(self) -> "redis.Redis":
        return self._r

    @property
    def prefix(self) -> str:
        return self._prefix

    def _key_table(self, kind: str) -> str:
        return f"{self._prefix}:{kind}"

    def _key_seq(self, kind: str) -> str:
        return f"{self._prefix}:seq:{kind}"

    def get(self, kind: str, key: str) -> Optional[JsonLike]:
        return _json_load(self._r.hget(self._key_table(kind), str(key)))

    def put(self, kind: str, key: str, data: JsonLike) -> None:
        self._r.hset(self._key_table(kind), str(key), json.dumps(data))

    def put_many(self, entries: Iterable[Entry]) -> None:
        # MULTI/EXEC: інші клієнти не бачать половину коміту
        pipe = self._r.pipeline(transaction=True)
        for kind, key, data in entries:
            pipe.hset(self._key_table(kind), str(key), json.dumps(data))
        pipe.execute()

    def values(self, kind: str) -> List[JsonLike]:
        out: List[JsonLike] = []
        for raw in self._r.hvals(self._key_table(kind)):
            obj = _json_load(raw)
            if obj is not None:
                out.append(obj)
        return out

    def count(self, kind: str) -> int:
        return int(self._r.hlen(self._key_table(kind)))

    def next_id(self, kind: str) -> int:
        return int(self._r.incr(self._key_seq(kind)))
