"""
Services package for business logic layer.

The pure domain modules are re-exported here. The session-bound services
(OrderService, PromoCodeService, CartService) are imported from their own
modules, since the repositories depend on cart_merge.
"""
from storefront.services.cart_merge import CartLine, add_line, merge_carts
from storefront.services.order_state import (
    StockWarning,
    advance_fulfillment,
    cancel,
    confirm_delivery,
    reject_payment,
    stock_warnings,
    verify_payment,
)
from storefront.services.pricing import LineSnapshot, OrderTotals, compute_totals, round_money
from storefront.services.promo_evaluator import PromoEvaluation, PromoRejection, evaluate

__all__ = [
    # Order lifecycle
    "verify_payment",
    "reject_payment",
    "advance_fulfillment",
    "cancel",
    "confirm_delivery",
    "stock_warnings",
    "StockWarning",
    # Pricing
    "LineSnapshot",
    "OrderTotals",
    "compute_totals",
    "round_money",
    # Promo codes
    "evaluate",
    "PromoEvaluation",
    "PromoRejection",
    # Cart
    "CartLine",
    "add_line",
    "merge_carts",
]
