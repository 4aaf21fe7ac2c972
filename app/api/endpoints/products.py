# food_delivery_api/app/api/endpoints/products.py
from typing import Any, List, Literal, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ProductNotFound
from app.crud.crud_product import product as crud_product
from app.db.session import get_db
from app.schemas.product import Product as ProductSchema, ProductFilter

router = APIRouter()


@router.get("/", response_model=List[ProductSchema])
async def read_products(
    db: AsyncSession = Depends(get_db),
    category_id: Optional[int] = None,
    supplier_id: Optional[int] = None,
) -> Any:
    if category_id is not None and supplier_id is not None:
        return await crud_product.get_by_category_and_supplier(
            db, category_id=category_id, supplier_id=supplier_id
        )
    if category_id is not None:
        return await crud_product.get_by_category(db, category_id=category_id)
    if supplier_id is not None:
        return await crud_product.get_by_supplier(db, supplier_id=supplier_id)
    return await crud_product.get_all(db)


@router.get("/search", response_model=List[ProductSchema])
async def search_products(
    db: AsyncSession = Depends(get_db),
    search: str = "",
    order_by: Literal["id", "name", "price"] = "id",
    sort_direction: Literal["asc", "desc"] = "asc",
    is_open_now: bool = False,
    category_ids: List[int] = Query([]),
    min_price: int = Query(0, ge=0),
    max_price: int = Query(0, ge=0),
) -> Any:
    """
    Filtered listing. `search` matches name or description, prices of 0 mean
    no bound, `is_open_now` keeps products whose supplier is currently open.
    """
    filters = ProductFilter(
        search=search,
        order_by=order_by,
        sort_direction=sort_direction,
        is_open_now=is_open_now,
        category_ids=category_ids,
        min_price=min_price,
        max_price=max_price,
    )
    return await crud_product.get_filtered(db, filters=filters)


@router.get("/{product_id}", response_model=ProductSchema)
async def read_product(product_id: int, db: AsyncSession = Depends(get_db)) -> Any:
    db_product = await crud_product.get(db, product_id)
    if db_product is None:
        raise ProductNotFound()
    return db_product
