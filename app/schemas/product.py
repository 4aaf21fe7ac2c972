# food_delivery_api/app/schemas/product.py
from datetime import time
from typing import Literal, Optional

from pydantic import BaseModel, Field


class Category(BaseModel):
    id: int
    name: str
    image: Optional[str] = None
    description: Optional[str] = None

    class Config:
        from_attributes = True


class Supplier(BaseModel):
    id: int
    name: str
    type: Optional[str] = None
    image: Optional[str] = None
    address: Optional[str] = None
    open_time: time
    close_time: time

    class Config:
        from_attributes = True


class Product(BaseModel):
    id: int
    name: str
    category_id: int
    category: Category
    supplier_id: int
    supplier: Supplier
    image: Optional[str] = None
    price: int
    description: Optional[str] = None

    class Config:
        from_attributes = True


class ProductFilter(BaseModel):
    """Query parameters of the filtered product listing."""
    search: str = ""
    order_by: Literal["id", "name", "price"] = "id"
    sort_direction: Literal["asc", "desc"] = "asc"
    is_open_now: bool = False
    category_ids: list[int] = Field(default_factory=list)
    # 0 means no bound
    min_price: int = Field(0, ge=0)
    max_price: int = Field(0, ge=0)
