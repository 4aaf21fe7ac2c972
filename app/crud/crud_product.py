# food_delivery_api/app/crud/crud_product.py
from datetime import datetime, time
from typing import Optional, Sequence

from sqlalchemy import and_, asc, desc, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.crud.base import CRUDBase
from app.models.product import Product, Supplier
from app.schemas.product import ProductFilter

ORDER_COLUMNS = {
    "id": Product.id,
    "name": Product.name,
    "price": Product.price,
}


class CRUDProduct(CRUDBase[Product, ProductFilter, ProductFilter]):
    async def _list(self, db: AsyncSession, *conditions) -> Sequence[Product]:
        stmt = select(Product).where(*conditions).order_by(Product.id)
        result = await db.execute(stmt)
        return result.scalars().all()

    async def get_all(self, db: AsyncSession) -> Sequence[Product]:
        return await self._list(db)

    async def get_by_category(self, db: AsyncSession, *, category_id: int) -> Sequence[Product]:
        return await self._list(db, Product.category_id == category_id)

    async def get_by_supplier(self, db: AsyncSession, *, supplier_id: int) -> Sequence[Product]:
        return await self._list(db, Product.supplier_id == supplier_id)

    async def get_by_category_and_supplier(
        self, db: AsyncSession, *, category_id: int, supplier_id: int
    ) -> Sequence[Product]:
        return await self._list(db, Product.category_id == category_id, Product.supplier_id == supplier_id)

    async def get_filtered(
        self, db: AsyncSession, *, filters: ProductFilter, now: Optional[time] = None
    ) -> Sequence[Product]:
        stmt = select(Product)
        if filters.search:
            # Wildcards typed by the user are matched literally
            escaped = filters.search.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            pattern = f"%{escaped}%"
            stmt = stmt.where(or_(
                Product.name.ilike(pattern, escape="\\"),
                Product.description.ilike(pattern, escape="\\"),
            ))
        if filters.category_ids:
            stmt = stmt.where(Product.category_id.in_(filters.category_ids))
        if filters.min_price:
            stmt = stmt.where(Product.price >= filters.min_price)
        if filters.max_price:
            stmt = stmt.where(Product.price <= filters.max_price)
        if filters.is_open_now:
            current = now or datetime.now().time()
            stmt = stmt.join(Supplier, Product.supplier_id == Supplier.id).where(
                and_(Supplier.open_time <= current, Supplier.close_time >= current)
            )

        column = ORDER_COLUMNS[filters.order_by]
        direction = desc if filters.sort_direction == "desc" else asc
        # id as tie breaker keeps paging stable
        stmt = stmt.order_by(direction(column), Product.id)
        result = await db.execute(stmt)
        return result.scalars().all()


product = CRUDProduct(Product)
