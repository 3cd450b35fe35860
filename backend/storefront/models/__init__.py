"""
SQLAlchemy models package.
All models are imported here for easy access and Alembic discovery.
"""
from storefront.models.announcement import Announcement
from storefront.models.cart import CartItem
from storefront.models.order import (
    Order,
    OrderSequence,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from storefront.models.product import Product
from storefront.models.promo_code import PromoCode

__all__ = [
    "Product",
    "Order",
    "OrderSequence",
    "OrderStatus",
    "PaymentStatus",
    "PaymentMethod",
    "PromoCode",
    "CartItem",
    "Announcement",
]
