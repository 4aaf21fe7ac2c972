# food_delivery_api/app/crud/crud_user.py
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Optional
from loguru import logger

from app.crud.base import CRUDBase
from app.models.user import User
from app.schemas.user import RegisterRequest, UserUpdate
from app.core.exceptions import UserAlreadyExists, UserNotFound


class CRUDUser(CRUDBase[User, RegisterRequest, UserUpdate]):
    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[User]:
        stmt = select(User).filter(User.email == email)
        result = await db.execute(stmt)
        return result.scalars().first()

    async def get_by_username(self, db: AsyncSession, *, username: str) -> Optional[User]:
        stmt = select(User).filter(User.username == username)
        result = await db.execute(stmt)
        return result.scalars().first()

    async def create(self, db: AsyncSession, *, obj_in: RegisterRequest, hashed_password: str) -> User:
        if await self.get_by_email(db, email=obj_in.email):
            raise UserAlreadyExists("user with this email already exists")
        if obj_in.username and await self.get_by_username(db, username=obj_in.username):
            raise UserAlreadyExists("user with this username already exists")
        db_obj = User(
            email=obj_in.email,
            hashed_password=hashed_password,
            first_name=obj_in.first_name,
            last_name=obj_in.last_name,
            username=obj_in.username or None,
            phone=obj_in.phone,
            address=obj_in.address,
            age=obj_in.age,
        )
        db.add(db_obj)
        try:
            await db.commit()
        except IntegrityError as e:
            # Lost a race against a concurrent registration with the same email/username
            await db.rollback()
            logger.warning(f"Integrity error registering {obj_in.email}: {e}")
            raise UserAlreadyExists("user with this email or username already exists")
        await db.refresh(db_obj)
        return db_obj

    async def update_password_hash(self, db: AsyncSession, *, user_id: int, hashed_password: str) -> User:
        db_obj = await self.get(db, user_id)
        if db_obj is None:
            raise UserNotFound()
        db_obj.hashed_password = hashed_password
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def update_profile(self, db: AsyncSession, *, user: User, username_changed: bool) -> User:
        """Persists profile fields already set on `user`."""
        if username_changed and user.username:
            stmt = select(User).filter(User.username == user.username, User.id != user.id)
            result = await db.execute(stmt)
            if result.scalars().first():
                await db.rollback()
                raise UserAlreadyExists("username is already taken")
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

user = CRUDUser(User)
