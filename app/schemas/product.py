from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.schemas.common import Money


# ---------- Category ----------
class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    slug: Optional[str] = None  # derived from the name when omitted
    sort_order: int = 0
    is_active: bool = True


class CategoryRead(BaseModel):
    id: str
    name: str
    slug: str
    sort_order: int
    is_active: bool

    class Config:
        from_attributes = True


class CategoryBrief(BaseModel):
    id: str
    name: str
    slug: str

    class Config:
        from_attributes = True


# ---------- Product ----------
class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: Money = Field(ge=0)
    category_id: str
    image_url: Optional[str] = None
    is_active: bool = True
    is_popular: bool = False
    sort_order: int = 0


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Money] = Field(default=None, ge=0)
    category_id: Optional[str] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None
    is_popular: Optional[bool] = None
    sort_order: Optional[int] = None

    @field_validator("name", "price", "category_id", "is_active", "is_popular", "sort_order")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class ProductRead(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: Money
    image_url: Optional[str] = None
    is_active: bool
    is_popular: bool
    sort_order: int
    category: CategoryBrief
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryWithProducts(CategoryRead):
    products: List[ProductRead] = []
