# food_delivery_api/app/crud/base.py
from typing import Any, Dict, Generic, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        return await db.get(self.model, id)

    async def get_multi(self, db: AsyncSession, *, skip: int = 0, limit: int = 100) -> Sequence[ModelType]:
        stmt = select(self.model).order_by(self.model.id).offset(skip).limit(limit)
        result = await db.execute(stmt)
        return result.scalars().all()

    def apply_changes(self, db_obj: ModelType, obj_in: Union[UpdateSchemaType, Dict[str, Any]]) -> Dict[str, Any]:
        """
        Copies the non-empty values of `obj_in` onto `db_obj` and returns what changed.
        Nothing is committed.
        """
        update_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        changed = {}
        for field, value in update_data.items():
            if value is None or value == "":
                continue
            if getattr(db_obj, field) != value:
                setattr(db_obj, field, value)
                changed[field] = value
        return changed
