# food_delivery_api/app/services/auth_service.py
import secrets
from typing import Literal

from jose import JWTError
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import security
from app.core.config import Settings, settings as default_settings
from app.core.exceptions import (
    CacheError, InvalidCredentials, InvalidCurrentPassword, InvalidResetCode,
    NotificationError, PasswordResetFailed, StorageFailure, TokenInvalid,
    UserNotFound,
)
from app.crud.crud_session import SessionCache
from app.crud.crud_user import CRUDUser, user as crud_user
from app.models.user import User
from app.schemas.token import TokenMapping, TokenResponse
from app.schemas.user import RegisterRequest
from app.services.email_service import Notifier


class AuthService:
    """
    Login, registration, password flows and session tokens.

    A token is only accepted while its identifier is the one stored in the
    session cache for that user and role, so logging in again, rotating or
    logging out invalidates earlier tokens before they expire.
    Collaborator failures are logged here and surfaced as StorageFailure /
    PasswordResetFailed without their original text.
    """

    def __init__(
        self,
        db: AsyncSession,
        session_cache: SessionCache,
        notifier: Notifier,
        settings: Settings = default_settings,
        hasher: security.PasswordHasher = security.password_hasher,
        users: CRUDUser = crud_user,
    ):
        self.db = db
        self.session_cache = session_cache
        self.notifier = notifier
        self.settings = settings
        self.hasher = hasher
        self.users = users

    # --- Token pairs ---
    def _issue_token_pair(self, user_id: int) -> tuple[TokenResponse, TokenMapping]:
        try:
            access_token, access_uid = security.generate_token(
                user_id, self.settings.ACCESS_LIFETIME_MINUTES, self.settings.ACCESS_SECRET
            )
            refresh_token, refresh_uid = security.generate_token(
                user_id, self.settings.REFRESH_LIFETIME_MINUTES, self.settings.REFRESH_SECRET
            )
        except JWTError as e:
            logger.error(f"Failed to sign tokens for user ID {user_id}: {e}")
            raise StorageFailure("failed to generate token pair")
        tokens = TokenResponse(access_token=access_token, refresh_token=refresh_token)
        return tokens, TokenMapping(access_uid=access_uid, refresh_uid=refresh_uid)

    async def _save_token_mapping(self, user_id: int, mapping: TokenMapping, *, replace: bool) -> None:
        try:
            if replace:
                await self.session_cache.replace_tokens(user_id, mapping)
            else:
                await self.session_cache.store_tokens(user_id, mapping)
        except CacheError as e:
            logger.error(f"Failed to store token pair for user ID {user_id}: {e}")
            raise StorageFailure("failed to store token pair")

    async def get_token_pair(self, user_id: int) -> TokenResponse:
        """Rotates the session: the previous pair stops working immediately."""
        tokens, mapping = self._issue_token_pair(user_id)
        await self._save_token_mapping(user_id, mapping, replace=True)
        return tokens

    async def _validate_token(self, token: str, role: Literal["access", "refresh"]) -> int:
        secret = self.settings.ACCESS_SECRET if role == "access" else self.settings.REFRESH_SECRET
        claims = security.decode_token(token, secret)
        try:
            if role == "access":
                current_uid = await self.session_cache.get_access_uid(claims.user_id)
            else:
                current_uid = await self.session_cache.get_refresh_uid(claims.user_id)
        except CacheError as e:
            logger.error(f"Failed to read {role} token identifier for user ID {claims.user_id}: {e}")
            raise StorageFailure("failed to retrieve session")
        if not secrets.compare_digest(current_uid.encode(), claims.token_uid.encode()):
            raise TokenInvalid(f"{role} token has been revoked")
        return claims.user_id

    async def validate_access_token(self, token: str) -> int:
        return await self._validate_token(token, "access")

    async def refresh(self, refresh_token: str) -> TokenResponse:
        user_id = await self._validate_token(refresh_token, "refresh")
        return await self.get_token_pair(user_id)
    # --- End token pairs ---

    async def _get_user_by_email(self, email: str) -> User | None:
        try:
            return await self.users.get_by_email(self.db, email=email)
        except SQLAlchemyError as e:
            logger.error(f"Failed to look up user {email}: {e}")
            raise StorageFailure("failed to retrieve user")

    async def login(self, email: str, password: str) -> TokenResponse:
        user = await self._get_user_by_email(email)
        if user is None:
            logger.info(f"Login attempt for unknown email: {email}")
            raise InvalidCredentials()
        if not self.hasher.verify(password, user.hashed_password):
            logger.info(f"Login attempt with wrong password for user ID {user.id}")
            raise InvalidCredentials()

        tokens, mapping = self._issue_token_pair(user.id)
        # Overwrites whatever session the user had before
        await self._save_token_mapping(user.id, mapping, replace=False)
        logger.info(f"User ID {user.id} logged in")
        return tokens

    async def register(self, request: RegisterRequest) -> User:
        hashed_password = self.hasher.hash(request.password)
        try:
            db_user = await self.users.create(self.db, obj_in=request, hashed_password=hashed_password)
        except SQLAlchemyError as e:
            logger.error(f"Failed to register {request.email}: {e}")
            raise StorageFailure("failed to register user")
        logger.info(f"Registered user ID {db_user.id}")
        return db_user

    async def logout(self, user_id: int) -> None:
        try:
            await self.session_cache.delete_tokens(user_id)
        except CacheError as e:
            logger.error(f"Failed to delete tokens for user ID {user_id}: {e}")
            raise StorageFailure("failed to logout")
        logger.info(f"User ID {user_id} logged out")

    # --- Password flows ---
    async def initiate_password_reset(self, email: str) -> None:
        try:
            user = await self.users.get_by_email(self.db, email=email)
        except SQLAlchemyError as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise PasswordResetFailed()
        if user is None:
            logger.warning(f"Password reset requested for unknown email: {email}")
            raise PasswordResetFailed()

        reset_code = security.generate_reset_code(self.settings.RESET_CODE_LENGTH)
        try:
            await self.session_cache.store_reset_code(user.email, reset_code)
        except CacheError as e:
            logger.error(f"Failed to store reset code for {user.email}: {e}")
            raise PasswordResetFailed()

        try:
            await self.notifier.send_reset_code(user.email, reset_code)
        except NotificationError as e:
            logger.error(f"Failed to send reset code email to {user.email}: {e}")
            raise PasswordResetFailed()
        logger.info(f"Reset code sent to user ID {user.id}")

    async def submit_reset_code(self, email: str, reset_code: str, new_password: str) -> None:
        try:
            stored_code = await self.session_cache.get_reset_code(email)
        except CacheError as e:
            logger.error(f"Failed to read reset code for {email}: {e}")
            raise StorageFailure("failed to retrieve reset code")

        if not secrets.compare_digest(stored_code.encode(), reset_code.encode()):
            logger.warning(f"Invalid reset code submitted for {email}")
            raise InvalidResetCode()

        user = await self._get_user_by_email(email)
        if user is None:
            raise StorageFailure("failed to retrieve user")
        try:
            await self.users.update_password_hash(
                self.db, user_id=user.id, hashed_password=self.hasher.hash(new_password)
            )
        except (SQLAlchemyError, UserNotFound) as e:
            logger.error(f"Failed to update password for user ID {user.id}: {e}")
            raise StorageFailure("failed to update password")
        logger.info(f"Password reset for user ID {user.id}")

        # The password is already changed, cleanup failures are only logged
        try:
            await self.session_cache.delete_reset_code(email)
            if self.settings.RESET_PASSWORD_REVOKES_SESSIONS:
                await self.session_cache.delete_tokens(user.id)
        except CacheError as e:
            logger.error(f"Failed to clean up after password reset for user ID {user.id}: {e}")

    async def change_password(self, old_password: str, new_password: str, user_id: int) -> TokenResponse:
        try:
            user = await self.users.get(self.db, user_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to get user ID {user_id}: {e}")
            raise StorageFailure("failed to retrieve user")
        if user is None:
            raise StorageFailure("failed to retrieve user")

        if not self.hasher.verify(old_password, user.hashed_password):
            raise InvalidCurrentPassword()

        try:
            await self.users.update_password_hash(
                self.db, user_id=user.id, hashed_password=self.hasher.hash(new_password)
            )
        except (SQLAlchemyError, UserNotFound) as e:
            logger.error(f"Failed to update password for user ID {user.id}: {e}")
            raise StorageFailure("failed to update password")

        # From here on the new password stays committed even if the tokens fail
        tokens, mapping = self._issue_token_pair(user.id)
        await self._save_token_mapping(user.id, mapping, replace=True)
        logger.info(f"Password changed for user ID {user.id}, previous session revoked")
        return tokens
    # --- End password flows ---
