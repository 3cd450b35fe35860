"""
PromoCode Pydantic schemas for request/response validation.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from storefront.schemas.common import Money, UtcDatetime


def _normalize_categories(v: Optional[list[str]]) -> Optional[list[str]]:
    if v is None:
        return None
    return sorted({c.strip().lower() for c in v if c and c.strip()})


class PromoCodeValidateRequest(BaseModel):
    """Body of POST /promocodes/validate."""

    code: str = Field(..., min_length=1, max_length=20)
    cart_total: Decimal = Field(..., alias="cartTotal", gt=0)
    categories: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class PromoCodeValidateResponse(BaseModel):
    valid: bool = True
    code: str
    discount_percentage: int = Field(alias="discountPercentage")
    discount_amount: Money = Field(alias="discountAmount")
    description: str

    model_config = ConfigDict(populate_by_name=True)


class PromoCodeBase(BaseModel):
    description: str = Field(..., min_length=5, max_length=255)
    discount_percentage: int = Field(..., alias="discountPercentage", ge=1, le=100)
    max_discount: Optional[Decimal] = Field(None, alias="maxDiscount", ge=0)
    min_purchase: Optional[Decimal] = Field(None, alias="minPurchase", ge=0)
    valid_from: UtcDatetime = Field(..., alias="validFrom")
    valid_to: UtcDatetime = Field(..., alias="validTo")
    is_active: bool = Field(True, alias="isActive")
    applicable_categories: Optional[list[str]] = Field(None, alias="applicableCategories")
    usage_limit: Optional[int] = Field(None, alias="usageLimit", ge=1)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("applicable_categories")
    @classmethod
    def normalize_categories(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _normalize_categories(v)


class PromoCodeCreate(PromoCodeBase):
    """Schema for creating a promo code (admin)."""

    code: str = Field(..., min_length=3, max_length=20, pattern=r"^[A-Za-z0-9_-]+$")

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode="after")
    def window_is_ordered(self) -> "PromoCodeCreate":
        if self.valid_from > self.valid_to:
            raise ValueError("validFrom must not be after validTo")
        return self


class PromoCodeUpdate(BaseModel):
    """Schema for updating a promo code. The code itself is immutable."""

    description: Optional[str] = Field(None, min_length=5, max_length=255)
    discount_percentage: Optional[int] = Field(None, alias="discountPercentage", ge=1, le=100)
    max_discount: Optional[Decimal] = Field(None, alias="maxDiscount", ge=0)
    min_purchase: Optional[Decimal] = Field(None, alias="minPurchase", ge=0)
    valid_from: Optional[UtcDatetime] = Field(None, alias="validFrom")
    valid_to: Optional[UtcDatetime] = Field(None, alias="validTo")
    is_active: Optional[bool] = Field(None, alias="isActive")
    applicable_categories: Optional[list[str]] = Field(None, alias="applicableCategories")
    usage_limit: Optional[int] = Field(None, alias="usageLimit", ge=1)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("applicable_categories")
    @classmethod
    def normalize_categories(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _normalize_categories(v)


class PromoCodeResponse(BaseModel):
    """Schema for promo code API responses."""

    id: UUID
    code: str
    description: str
    discount_percentage: int = Field(alias="discountPercentage")
    max_discount: Optional[Money] = Field(None, alias="maxDiscount")
    min_purchase: Optional[Money] = Field(None, alias="minPurchase")
    valid_from: datetime = Field(alias="validFrom")
    valid_to: datetime = Field(alias="validTo")
    is_active: bool = Field(alias="isActive")
    applicable_categories: Optional[list[str]] = Field(None, alias="applicableCategories")
    usage_limit: Optional[int] = Field(None, alias="usageLimit")
    usage_count: int = Field(alias="usageCount")
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class PromoCodeStats(BaseModel):
    total: int
    active: int
    expired: int
    total_usage: int = Field(alias="totalUsage")

    model_config = ConfigDict(populate_by_name=True)
