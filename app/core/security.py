# food_delivery_api/app/core/security.py
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import secrets
import uuid

from jose import jwt, JWTError, ExpiredSignatureError
from loguru import logger
from passlib.context import CryptContext

from .config import settings
from .exceptions import TokenExpired, TokenInvalid, TokenMalformed


# --- Passwords ---
class PasswordHasher:
    """bcrypt hashing behind a small hash/verify interface."""

    def __init__(self, rounds: int = settings.BCRYPT_ROUNDS):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        # bcrypt only looks at the first 72 bytes
        return self._context.hash(password.encode('utf-8')[:72])

    def verify(self, password: str, hashed_password: str) -> bool:
        try:
            return self._context.verify(password.encode('utf-8')[:72], hashed_password)
        except ValueError as e:
            # unknown or corrupted hash format
            logger.warning(f"Could not verify password hash: {e}")
            return False


password_hasher = PasswordHasher()
# --- End passwords ---


# --- Token codec ---
@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    token_uid: str
    expires_at: datetime


def generate_token(
    user_id: int,
    lifetime_minutes: int,
    secret: str,
    now: Optional[datetime] = None,
) -> tuple[str, str]:
    """
    Creates a signed token for `user_id` and returns it together with its
    identifier. The identifier is what the session cache stores, so a token
    can be revoked server side before it expires.
    """
    now = now or datetime.now(timezone.utc)
    token_uid = str(uuid.uuid4())
    to_encode: Dict[str, Any] = {
        "sub": str(user_id),
        "uid": token_uid,
        "iat": now,
        "exp": now + timedelta(minutes=lifetime_minutes),
    }
    encoded_jwt = jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)
    return encoded_jwt, token_uid


def decode_token(token: str, secret: str) -> TokenClaims:
    """
    Verifies signature and expiry, then extracts user id and identifier.
    Raises TokenExpired, TokenInvalid or TokenMalformed.
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpired()
    except JWTError as e:
        raise TokenInvalid(f"token is invalid: {e}")

    token_uid = payload.get("uid")
    if not isinstance(token_uid, str) or not token_uid:
        raise TokenMalformed()
    try:
        user_id = int(payload.get("sub"))
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
    except (TypeError, ValueError, KeyError):
        raise TokenMalformed()
    return TokenClaims(user_id=user_id, token_uid=token_uid, expires_at=expires_at)
# --- End token codec ---


def generate_reset_code(length: int = settings.RESET_CODE_LENGTH) -> str:
    """Random numeric code, zero padded to `length` digits."""
    return f"{secrets.randbelow(10 ** length):0{length}d}"
