# food_delivery_api/app/crud/crud_session.py
from datetime import timedelta

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import ResetCodeExpiredOrInvalid, SessionNotFound
from app.db.kv_store import KeyValueStore
from app.schemas.token import TokenMapping


def access_key(user_id: int) -> str:
    return f"access:{user_id}"

def refresh_key(user_id: int) -> str:
    return f"refresh:{user_id}"

def reset_code_key(email: str) -> str:
    return f"reset_code:{email}"


class SessionCache:
    """
    Server-side record of the token identifiers currently valid for each user,
    plus pending password reset codes.

    One mapping per user: storing a new one overwrites the previous session.
    """

    def __init__(self, store: KeyValueStore, settings: Settings = default_settings):
        self.store = store
        self.access_ttl = timedelta(minutes=settings.ACCESS_LIFETIME_MINUTES)
        self.refresh_ttl = timedelta(minutes=settings.REFRESH_LIFETIME_MINUTES)
        self.reset_code_ttl = timedelta(minutes=settings.RESET_CODE_EXPIRE_MINUTES)

    def _token_items(self, user_id: int, tokens: TokenMapping):
        return [
            (access_key(user_id), tokens.access_uid, self.access_ttl),
            (refresh_key(user_id), tokens.refresh_uid, self.refresh_ttl),
        ]

    async def store_tokens(self, user_id: int, tokens: TokenMapping) -> None:
        await self.store.set_many(self._token_items(user_id, tokens))

    async def replace_tokens(self, user_id: int, tokens: TokenMapping) -> None:
        """Drops the current pair and stores `tokens` in the same transaction."""
        await self.store.set_many(self._token_items(user_id, tokens), replace=True)

    async def get_tokens(self, user_id: int) -> TokenMapping:
        access_uid = await self.store.get(access_key(user_id))
        refresh_uid = await self.store.get(refresh_key(user_id))
        if access_uid is None or refresh_uid is None:
            raise SessionNotFound()
        return TokenMapping(access_uid=access_uid, refresh_uid=refresh_uid)

    async def get_access_uid(self, user_id: int) -> str:
        access_uid = await self.store.get(access_key(user_id))
        if access_uid is None:
            raise SessionNotFound()
        return access_uid

    async def get_refresh_uid(self, user_id: int) -> str:
        # Outlives the access key, so refresh keeps working after the access TTL
        refresh_uid = await self.store.get(refresh_key(user_id))
        if refresh_uid is None:
            raise SessionNotFound()
        return refresh_uid

    async def delete_tokens(self, user_id: int) -> None:
        await self.store.delete(access_key(user_id), refresh_key(user_id))

    # --- Reset codes ---
    async def store_reset_code(self, email: str, code: str) -> None:
        await self.store.set(reset_code_key(email), code, self.reset_code_ttl)

    async def get_reset_code(self, email: str) -> str:
        code = await self.store.get(reset_code_key(email))
        if code is None:
            raise ResetCodeExpiredOrInvalid()
        return code

    async def delete_reset_code(self, email: str) -> None:
        await self.store.delete(reset_code_key(email))
