# food_delivery_api/app/services/user_service.py
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import StorageFailure, UserNotFound
from app.crud.crud_user import user as crud_user
from app.models.user import User
from app.schemas.user import UserUpdate


async def update_user_profile(db: AsyncSession, *, user_id: int, user_in: UserUpdate) -> User:
    """Applies the non-empty fields of `user_in`; the rest of the profile is kept."""
    try:
        user = await crud_user.get(db, user_id)
    except SQLAlchemyError as e:
        logger.error(f"Failed to get user ID {user_id}: {e}")
        raise StorageFailure("failed to retrieve user")
    if user is None:
        raise UserNotFound()

    changed = crud_user.apply_changes(user, user_in)
    if not changed:
        return user

    try:
        user = await crud_user.update_profile(db, user=user, username_changed="username" in changed)
    except SQLAlchemyError as e:
        logger.error(f"Failed to update profile for user ID {user_id}: {e}")
        raise StorageFailure("failed to update profile")
    logger.info(f"Updated profile fields {sorted(changed)} for user ID {user_id}")
    return user
