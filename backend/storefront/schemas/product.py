"""
Product Pydantic schemas for request/response validation.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from storefront.schemas.common import Money


class ProductCreate(BaseModel):
    """Schema for creating a product (admin)."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=1000)
    category: str = Field(..., min_length=1, max_length=100)
    image: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    sale_price: Optional[Decimal] = Field(None, alias="salePrice", ge=0)
    stock: int = Field(0, ge=0)
    is_active: bool = Field(True, alias="isActive")
    featured: bool = False

    model_config = ConfigDict(populate_by_name=True)


class ProductUpdate(BaseModel):
    """Schema for updating a product (admin)."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    image: Optional[str] = Field(None, min_length=1)
    price: Optional[Decimal] = Field(None, ge=0)
    sale_price: Optional[Decimal] = Field(None, alias="salePrice", ge=0)
    stock: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = Field(None, alias="isActive")
    featured: Optional[bool] = None

    model_config = ConfigDict(populate_by_name=True)


class ProductResponse(BaseModel):
    """Schema for product API responses."""

    id: UUID
    name: str
    description: str
    category: str
    image: str
    price: Money
    sale_price: Optional[Money] = Field(None, alias="salePrice")
    stock: int
    is_active: bool = Field(alias="isActive")
    featured: bool
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class PaginatedProductsResponse(BaseModel):
    items: list[ProductResponse]
    total: int
    page: int
    page_size: int = Field(alias="pageSize")
    has_more: bool = Field(alias="hasMore")

    model_config = ConfigDict(populate_by_name=True)
