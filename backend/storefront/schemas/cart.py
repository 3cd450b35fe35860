"""
Cart Pydantic schemas for request/response validation.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.schemas.common import Money


class CartItemIn(BaseModel):
    """A single cart line sent by the client."""

    product_id: str = Field(..., alias="productId", min_length=1)
    quantity: int = Field(..., ge=1)
    color: Optional[str] = Field(None, max_length=50)
    size: Optional[str] = Field(None, max_length=50)
    # Overwrite the quantity instead of adding to it
    replace: bool = False

    model_config = ConfigDict(populate_by_name=True)


class LocalCartLine(BaseModel):
    """
    A line from a device-held cart.

    Quantities below 1 are accepted here and dropped by the merge.
    """

    product_id: str = Field(..., alias="productId", min_length=1)
    quantity: int
    color: Optional[str] = Field(None, max_length=50)
    size: Optional[str] = Field(None, max_length=50)

    model_config = ConfigDict(populate_by_name=True)


class CartMergeRequest(BaseModel):
    items: list[LocalCartLine] = Field(default_factory=list)


class CartLineResponse(BaseModel):
    """Cart line joined with live product data."""

    product_id: str = Field(alias="productId")
    quantity: int
    color: Optional[str] = None
    size: Optional[str] = None
    name: str
    image: Optional[str] = None
    category: Optional[str] = None
    price: Money
    sale_price: Optional[Money] = Field(None, alias="salePrice")
    unit_price: Money = Field(alias="unitPrice")
    line_total: Money = Field(alias="lineTotal")
    in_stock: bool = Field(alias="inStock")

    model_config = ConfigDict(populate_by_name=True)


class CartResponse(BaseModel):
    """Schema for cart API responses."""

    items: list[CartLineResponse]
    item_count: int = Field(alias="itemCount")
    subtotal: Money
    shipping_cost: Money = Field(alias="shippingCost")

    model_config = ConfigDict(populate_by_name=True)
