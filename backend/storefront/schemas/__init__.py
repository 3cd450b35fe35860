"""
Pydantic schemas package.
"""
from storefront.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementResponse,
    AnnouncementUpdate,
)
from storefront.schemas.cart import (
    CartItemIn,
    CartLineResponse,
    CartMergeRequest,
    CartResponse,
    LocalCartLine,
)
from storefront.schemas.order import (
    DeliveryConfirmation,
    OrderCreate,
    OrderItemIn,
    OrderItemResponse,
    OrderResponse,
    OrderSummary,
    OrderUpdate,
    PaginatedOrdersResponse,
    ShippingAddress,
    StatusHistoryEntry,
    StockWarningResponse,
)
from storefront.schemas.product import (
    PaginatedProductsResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from storefront.schemas.promo_code import (
    PromoCodeCreate,
    PromoCodeResponse,
    PromoCodeStats,
    PromoCodeUpdate,
    PromoCodeValidateRequest,
    PromoCodeValidateResponse,
)

__all__ = [
    # Order
    "ShippingAddress",
    "OrderItemIn",
    "OrderCreate",
    "OrderItemResponse",
    "StatusHistoryEntry",
    "OrderResponse",
    "OrderUpdate",
    "DeliveryConfirmation",
    "PaginatedOrdersResponse",
    "OrderSummary",
    "StockWarningResponse",
    # Promo code
    "PromoCodeValidateRequest",
    "PromoCodeValidateResponse",
    "PromoCodeCreate",
    "PromoCodeUpdate",
    "PromoCodeResponse",
    "PromoCodeStats",
    # Cart
    "CartItemIn",
    "LocalCartLine",
    "CartMergeRequest",
    "CartLineResponse",
    "CartResponse",
    # Product
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "PaginatedProductsResponse",
    # Announcement
    "AnnouncementCreate",
    "AnnouncementUpdate",
    "AnnouncementResponse",
]
