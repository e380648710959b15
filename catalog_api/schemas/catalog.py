from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryRead(CategoryBase):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    created_at: datetime
    updated_at: datetime


class CategoryWithCount(CategoryRead):
    # None unless the caller asked for counts
    product_count: Optional[int] = None


class CategoryBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: str


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    sku: Optional[str] = Field(default=None, max_length=50)


class ProductCreate(ProductBase):
    category_ids: list[int] = Field(..., min_length=1)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    sku: Optional[str] = Field(default=None, max_length=50)
    category_ids: Optional[list[int]] = Field(default=None, min_length=1)


class ProductRead(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    sku: Optional[str] = None
    categories: tuple[CategoryBrief, ...] = ()
    created_at: datetime
    updated_at: datetime


class ProductPage(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: list[ProductRead]
    total: int
    page: int
    page_size: int
