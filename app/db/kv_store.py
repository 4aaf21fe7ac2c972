# food_delivery_api/app/db/kv_store.py
import time
from datetime import timedelta
from typing import Callable, Dict, Optional, Protocol, Sequence, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError
from loguru import logger

from app.core.config import settings
from app.core.exceptions import CacheError

# (key, value, ttl)
KeyValueItem = Tuple[str, str, timedelta]


class KeyValueStore(Protocol):
    """Key-value store with per-key TTL. Each call is atomic."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        ...

    async def set_many(self, items: Sequence[KeyValueItem], *, replace: bool = False) -> None:
        """Writes all items in one transaction. `replace` deletes the keys first."""
        ...

    async def delete(self, *keys: str) -> int:
        ...

    async def close(self) -> None:
        ...


class RedisStore:
    def __init__(self, client: redis.Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisStore":
        return cls(redis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._client.get(key)
        except RedisError as e:
            raise CacheError(f"GET {key} failed: {e}") from e

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        try:
            await self._client.set(key, value, ex=ttl)
        except RedisError as e:
            raise CacheError(f"SET {key} failed: {e}") from e

    async def set_many(self, items: Sequence[KeyValueItem], *, replace: bool = False) -> None:
        keys = [key for key, _, _ in items]
        try:
            # MULTI/EXEC: either every key is written or none is
            async with self._client.pipeline(transaction=True) as pipe:
                if replace and keys:
                    pipe.delete(*keys)
                for key, value, ttl in items:
                    pipe.set(key, value, ex=ttl)
                await pipe.execute()
        except RedisError as e:
            raise CacheError(f"MULTI SET {keys} failed: {e}") from e

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return await self._client.delete(*keys)
        except RedisError as e:
            raise CacheError(f"DEL {list(keys)} failed: {e}") from e

    async def close(self) -> None:
        await self._client.aclose()


class InMemoryStore:
    """
    Process-local store for development and tests. `clock` returns seconds
    and can be replaced to simulate expiry.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: Dict[str, Tuple[str, float]] = {}

    def _expired(self, key: str) -> bool:
        entry = self._data.get(key)
        if entry is None:
            return True
        if entry[1] <= self._clock():
            del self._data[key]
            return True
        return False

    async def get(self, key: str) -> Optional[str]:
        if self._expired(key):
            return None
        return self._data[key][0]

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        self._data[key] = (value, self._clock() + ttl.total_seconds())

    async def set_many(self, items: Sequence[KeyValueItem], *, replace: bool = False) -> None:
        if replace:
            for key, _, _ in items:
                self._data.pop(key, None)
        for key, value, ttl in items:
            await self.set(key, value, ttl)

    async def delete(self, *keys: str) -> int:
        deleted = 0
        for key in keys:
            if not self._expired(key):
                del self._data[key]
                deleted += 1
        return deleted

    async def close(self) -> None:
        self._data.clear()


# --- Process-wide store, created on first use ---
_kv_store: Optional[KeyValueStore] = None

def get_kv_store() -> KeyValueStore:
    global _kv_store
    if _kv_store is None:
        if settings.CACHE_BACKEND == "memory":
            logger.warning("Using the in-memory session cache; sessions are lost on restart.")
            _kv_store = InMemoryStore()
        else:
            _kv_store = RedisStore.from_url(settings.REDIS_URL)
    return _kv_store


async def close_kv_store():
    global _kv_store
    if _kv_store is not None:
        await _kv_store.close()
        _kv_store = None
