"""
API routers package.
"""
from storefront.routers.admin_orders import router as admin_orders_router
from storefront.routers.announcements import router as announcements_router
from storefront.routers.cart import router as cart_router
from storefront.routers.health import router as health_router
from storefront.routers.orders import router as orders_router
from storefront.routers.products import admin_router as admin_products_router
from storefront.routers.products import router as products_router
from storefront.routers.promocodes import admin_router as admin_promocodes_router
from storefront.routers.promocodes import router as promocodes_router

__all__ = [
    "health_router",
    "products_router",
    "admin_products_router",
    "cart_router",
    "orders_router",
    "admin_orders_router",
    "promocodes_router",
    "admin_promocodes_router",
    "announcements_router",
]
