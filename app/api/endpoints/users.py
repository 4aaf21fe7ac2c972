# food_delivery_api/app/api/endpoints/users.py
from typing import Any, List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user, get_current_user_id
from app.crud.crud_user import user as crud_user
from app.db.session import get_db
from app.models.user import User as UserModel
from app.schemas.user import User as UserSchema, UserUpdate
from app.services.user_service import update_user_profile

router = APIRouter()


@router.get("/", response_model=List[UserSchema])
async def read_users(
    db: AsyncSession = Depends(get_db),
    skip: int = 0,
    limit: int = 100,
    _: int = Depends(get_current_user_id),
) -> Any:
    return await crud_user.get_multi(db, skip=skip, limit=limit)


@router.get("/me", response_model=UserSchema)
async def read_user_me(current_user: UserModel = Depends(get_current_user)) -> Any:
    return current_user


@router.patch("/me", response_model=UserSchema)
async def update_user_me(
    *,
    db: AsyncSession = Depends(get_db),
    user_in: UserUpdate,
    user_id: int = Depends(get_current_user_id),
) -> Any:
    """
    Updates the logged-in user's profile. Fields left out (or empty) keep
    their current value; a new username must not belong to another user.
    """
    return await update_user_profile(db, user_id=user_id, user_in=user_in)
