# food_delivery_api/app/api/dependencies.py
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import TokenInvalid, UserNotFound
from app.crud.crud_session import SessionCache
from app.crud.crud_user import user as crud_user
from app.db.kv_store import KeyValueStore, get_kv_store
from app.db.session import get_db
from app.models.user import User as UserModel
from app.services.auth_service import AuthService
from app.services.email_service import EmailNotifier, Notifier

# Only used to pull the Bearer token out of the Authorization header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def get_session_cache(store: KeyValueStore = Depends(get_kv_store)) -> SessionCache:
    return SessionCache(store)


def get_notifier() -> Notifier:
    return EmailNotifier()


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    session_cache: SessionCache = Depends(get_session_cache),
    notifier: Notifier = Depends(get_notifier),
) -> AuthService:
    return AuthService(db=db, session_cache=session_cache, notifier=notifier)


async def get_current_user_id(
    token: Optional[str] = Depends(oauth2_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> int:
    """Signature, expiry and the identifier stored for the user must all match."""
    if not token:
        raise TokenInvalid("missing bearer token")
    return await auth_service.validate_access_token(token)


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> UserModel:
    user = await crud_user.get(db, user_id)
    if user is None:
        raise UserNotFound()
    return user
