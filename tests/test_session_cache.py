from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.exceptions import CacheError, ResetCodeExpiredOrInvalid, SessionNotFound
from app.db.kv_store import RedisStore
from app.schemas.token import TokenMapping

MAPPING = TokenMapping(access_uid="access-1", refresh_uid="refresh-1")


async def test_store_and_get_tokens(session_cache, kv_store):
    await session_cache.store_tokens(7, MAPPING)

    assert await session_cache.get_tokens(7) == MAPPING
    assert await kv_store.get("access:7") == "access-1"
    assert await kv_store.get("refresh:7") == "refresh-1"


async def test_store_tokens_overwrites_previous_session(session_cache):
    await session_cache.store_tokens(7, MAPPING)
    newer = TokenMapping(access_uid="access-2", refresh_uid="refresh-2")

    await session_cache.store_tokens(7, newer)

    assert await session_cache.get_tokens(7) == newer


async def test_replace_tokens(session_cache):
    await session_cache.store_tokens(7, MAPPING)
    newer = TokenMapping(access_uid="access-2", refresh_uid="refresh-2")

    await session_cache.replace_tokens(7, newer)

    assert await session_cache.get_tokens(7) == newer


async def test_get_tokens_without_session(session_cache):
    with pytest.raises(SessionNotFound):
        await session_cache.get_tokens(99)


async def test_delete_tokens_is_idempotent(session_cache):
    await session_cache.store_tokens(7, MAPPING)

    await session_cache.delete_tokens(7)
    await session_cache.delete_tokens(7)

    with pytest.raises(SessionNotFound):
        await session_cache.get_tokens(7)


async def test_access_key_expires_before_refresh_key(session_cache, clock):
    await session_cache.store_tokens(7, MAPPING)

    clock.advance(minutes=session_cache.access_ttl.total_seconds() / 60 + 1)

    with pytest.raises(SessionNotFound):
        await session_cache.get_tokens(7)
    with pytest.raises(SessionNotFound):
        await session_cache.get_access_uid(7)
    assert await session_cache.get_refresh_uid(7) == "refresh-1"


async def test_reset_code_round_trip_and_expiry(session_cache, clock):
    await session_cache.store_reset_code("a@b.com", "123456")
    assert await session_cache.get_reset_code("a@b.com") == "123456"

    clock.advance(minutes=9, seconds=59)
    assert await session_cache.get_reset_code("a@b.com") == "123456"

    clock.advance(seconds=2)
    with pytest.raises(ResetCodeExpiredOrInvalid):
        await session_cache.get_reset_code("a@b.com")


async def test_new_reset_code_replaces_old_one(session_cache):
    await session_cache.store_reset_code("a@b.com", "111111")
    await session_cache.store_reset_code("a@b.com", "222222")

    assert await session_cache.get_reset_code("a@b.com") == "222222"


async def test_delete_reset_code(session_cache):
    await session_cache.store_reset_code("a@b.com", "123456")

    await session_cache.delete_reset_code("a@b.com")

    with pytest.raises(ResetCodeExpiredOrInvalid):
        await session_cache.get_reset_code("a@b.com")


# --- Redis backend ---
def make_redis_client():
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[1, True, True])
    pipeline_cm = MagicMock()
    pipeline_cm.__aenter__ = AsyncMock(return_value=pipe)
    pipeline_cm.__aexit__ = AsyncMock(return_value=False)
    client = MagicMock()
    client.pipeline.return_value = pipeline_cm
    return client, pipe


async def test_redis_set_many_uses_one_transaction():
    client, pipe = make_redis_client()
    store = RedisStore(client)

    await store.set_many(
        [("access:1", "a", timedelta(minutes=15)), ("refresh:1", "r", timedelta(days=7))],
        replace=True,
    )

    client.pipeline.assert_called_once_with(transaction=True)
    pipe.delete.assert_called_once_with("access:1", "refresh:1")
    pipe.set.assert_any_call("access:1", "a", ex=timedelta(minutes=15))
    pipe.set.assert_any_call("refresh:1", "r", ex=timedelta(days=7))
    pipe.execute.assert_awaited_once()


async def test_redis_errors_become_cache_errors():
    client, pipe = make_redis_client()
    client.get = AsyncMock(side_effect=RedisConnectionError("connection refused"))
    pipe.execute.side_effect = RedisConnectionError("connection refused")
    store = RedisStore(client)

    with pytest.raises(CacheError):
        await store.get("access:1")
    with pytest.raises(CacheError):
        await store.set_many([("access:1", "a", timedelta(minutes=1))])


async def test_redis_delete_without_keys_skips_round_trip():
    client, _ = make_redis_client()
    client.delete = AsyncMock()

    assert await RedisStore(client).delete() == 0
    client.delete.assert_not_awaited()
