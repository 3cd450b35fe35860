"""
Order Pydantic schemas for request/response validation.
"""
from datetime import datetime
from typing import Any, Literal, Optional
from uuid import UUID

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator, model_validator

from storefront.core.config import settings
from storefront.models.order import PaymentMethod
from storefront.schemas.common import Money


class ShippingAddress(BaseModel):
    """Structured delivery address."""

    phone_number: Optional[str] = Field(None, alias="phoneNumber", max_length=32)
    building_name: Optional[str] = Field(None, alias="buildingName", max_length=100)
    locality: str = Field(..., min_length=1, max_length=200)
    ward_no: Optional[str] = Field(None, alias="wardNo", max_length=20)
    district: str = Field(..., min_length=1, max_length=100)
    province: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., alias="postalCode", min_length=1, max_length=20)
    country: str = Field(default_factory=lambda: settings.default_country, min_length=1, max_length=100)
    landmark: Optional[str] = Field(None, max_length=200)

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class OrderItemIn(BaseModel):
    """
    A cart line submitted at checkout.

    Only the product reference, quantity and variant are read; names and
    prices sent by the client are ignored and re-read from the catalog.
    """

    product_id: str = Field(..., alias="productId", min_length=1)
    quantity: int
    color: Optional[str] = None
    size: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class OrderCreate(BaseModel):
    """Checkout request."""

    # None means "use the server-side cart"
    items: Optional[list[OrderItemIn]] = None
    shipping_address: ShippingAddress = Field(..., alias="shippingAddress")
    payment_method: PaymentMethod = Field(..., alias="paymentMethod")
    transaction_ref: str = Field(..., alias="transactionRef", min_length=1, max_length=255)
    payment_proof_image: AnyHttpUrl = Field(..., alias="paymentProofImage")
    promo_code: Optional[str] = Field(None, alias="promoCode", max_length=20)
    notes: Optional[str] = Field(None, max_length=1000)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("transaction_ref")
    @classmethod
    def strip_transaction_ref(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("transactionRef must not be blank")
        return v

    @field_validator("promo_code")
    @classmethod
    def blank_promo_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()


class OrderItemResponse(BaseModel):
    """Frozen line item snapshot."""

    product_id: str = Field(alias="productId")
    name: str
    unit_price: Money = Field(alias="unitPrice")
    quantity: int
    image: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class StatusHistoryEntry(BaseModel):
    status: str
    timestamp: datetime
    note: Optional[str] = None


class OrderResponse(BaseModel):
    """Schema for order API responses."""

    id: UUID
    order_number: str = Field(alias="orderNumber")
    user_id: str = Field(alias="userId")
    items: list[OrderItemResponse]
    subtotal: Money
    discount: Money
    shipping_cost: Money = Field(alias="shippingCost")
    tax_amount: Money = Field(alias="taxAmount")
    total_amount: Money = Field(alias="totalAmount")
    promo_code: Optional[str] = Field(None, alias="promoCode")
    shipping_address: dict[str, Any] = Field(alias="shippingAddress")
    payment_method: str = Field(alias="paymentMethod")
    transaction_ref: str = Field(alias="transactionRef")
    payment_proof_image: str = Field(alias="paymentProofImage")
    payment_status: str = Field(alias="paymentStatus")
    order_status: str = Field(alias="orderStatus")
    tracking_number: Optional[str] = Field(None, alias="trackingNumber")
    deliverer_name: Optional[str] = Field(None, alias="delivererName")
    deliverer_phone: Optional[str] = Field(None, alias="delivererPhone")
    delivery_otp: Optional[str] = Field(None, alias="deliveryOtp")
    notes: Optional[str] = None
    status_history: list[StatusHistoryEntry] = Field(alias="statusHistory")
    version: int
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class OrderUpdate(BaseModel):
    """
    Admin order update. Exactly one of paymentStatus / orderStatus.
    """

    payment_status: Optional[Literal["verified", "rejected"]] = Field(None, alias="paymentStatus")
    order_status: Optional[Literal["processing", "shipped", "delivered", "cancelled"]] = Field(
        None, alias="orderStatus"
    )
    tracking_number: Optional[str] = Field(None, alias="trackingNumber", max_length=100)
    deliverer_name: Optional[str] = Field(None, alias="delivererName", max_length=100)
    deliverer_phone: Optional[str] = Field(None, alias="delivererPhone", max_length=32)
    note: Optional[str] = Field(None, max_length=500)
    expected_version: Optional[int] = Field(None, alias="expectedVersion", ge=1)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def exactly_one_target(self) -> "OrderUpdate":
        if (self.payment_status is None) == (self.order_status is None):
            raise ValueError("Provide exactly one of paymentStatus or orderStatus")
        if self.tracking_number and self.order_status != "shipped":
            raise ValueError("trackingNumber can only be set when shipping")
        return self


class DeliveryConfirmation(BaseModel):
    delivery_otp: str = Field(..., alias="deliveryOtp", min_length=1, max_length=6)

    model_config = ConfigDict(populate_by_name=True)


class PaginatedOrdersResponse(BaseModel):
    """Schema for paginated admin order list."""

    items: list[OrderResponse]
    total: int
    page: int
    limit: int
    pages: int

    model_config = ConfigDict(populate_by_name=True)


class OrderSummary(BaseModel):
    """Admin dashboard order counters."""

    total_orders: int = Field(alias="totalOrders")
    pending_payment: int = Field(alias="pendingPayment")
    rejected_payment: int = Field(alias="rejectedPayment")
    processing: int
    shipped: int
    delivered: int
    cancelled: int
    revenue: Money

    model_config = ConfigDict(populate_by_name=True)


class StockWarningResponse(BaseModel):
    product_id: str = Field(alias="productId")
    name: str
    requested: int
    available: int
    message: str

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
