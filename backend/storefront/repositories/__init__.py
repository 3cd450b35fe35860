"""
Repository package for data access layer.
"""
from storefront.repositories.announcement import AnnouncementRepository
from storefront.repositories.base import BaseRepository
from storefront.repositories.cart import CartRepository
from storefront.repositories.order import OrderRepository
from storefront.repositories.product import ProductRepository
from storefront.repositories.promo_code import PromoCodeRepository

__all__ = [
    "BaseRepository",
    "ProductRepository",
    "OrderRepository",
    "PromoCodeRepository",
    "CartRepository",
    "AnnouncementRepository",
]
