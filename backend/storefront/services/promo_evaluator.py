"""
Promo code evaluation.

Read-only: evaluating a code never touches `usage_count`. Usage is consumed
only when an order referencing the code is written (see OrderService).
"""
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from storefront.schemas.common import as_utc
from storefront.services.pricing import ZERO, round_money


class PromoRejection(str, Enum):
    """Why a code was refused, in evaluation order."""

    CODE_NOT_FOUND = "CodeNotFound"
    INACTIVE = "Inactive"
    OUT_OF_WINDOW = "OutOfWindow"
    USAGE_EXHAUSTED = "UsageExhausted"
    BELOW_MINIMUM = "BelowMinimum"
    CATEGORY_MISMATCH = "CategoryMismatch"


@dataclass(frozen=True)
class PromoEvaluation:
    ok: bool
    discount_amount: Decimal = ZERO
    reason: Optional[PromoRejection] = None
    message: Optional[str] = None


def normalize_code(code: str) -> str:
    return code.strip().upper()


def _reject(reason: PromoRejection, message: str) -> PromoEvaluation:
    return PromoEvaluation(ok=False, reason=reason, message=message)


def evaluate(
    promo: Optional[Any],
    cart_subtotal: Decimal,
    cart_categories: Iterable[str] = (),
    *,
    now: Optional[datetime] = None,
    places: Optional[int] = None,
) -> PromoEvaluation:
    """
    Check a looked-up promo code against a cart and compute the discount.

    `promo` is the PromoCode row (or None when the lookup found nothing).
    """
    if promo is None:
        return _reject(PromoRejection.CODE_NOT_FOUND, "Invalid promo code")

    if not promo.is_active:
        return _reject(PromoRejection.INACTIVE, "Promo code is not active")

    now = as_utc(now or datetime.now(timezone.utc))
    if now < as_utc(promo.valid_from) or now > as_utc(promo.valid_to):
        return _reject(
            PromoRejection.OUT_OF_WINDOW,
            "Promo code has expired or is not yet active",
        )

    if promo.usage_limit is not None and promo.usage_count >= promo.usage_limit:
        return _reject(PromoRejection.USAGE_EXHAUSTED, "Promo code usage limit reached")

    cart_subtotal = Decimal(cart_subtotal)
    if promo.min_purchase is not None and cart_subtotal < Decimal(promo.min_purchase):
        return _reject(
            PromoRejection.BELOW_MINIMUM,
            f"Order total must be at least {promo.min_purchase} to use this code",
        )

    if promo.applicable_categories:
        allowed = {c.strip().lower() for c in promo.applicable_categories}
        in_cart = {c.strip().lower() for c in cart_categories}
        if not allowed & in_cart:
            return _reject(
                PromoRejection.CATEGORY_MISMATCH,
                "This promo code is not applicable to items in your cart",
            )

    raw = cart_subtotal * Decimal(promo.discount_percentage) / Decimal(100)
    if promo.max_discount is not None:
        raw = min(raw, Decimal(promo.max_discount))

    return PromoEvaluation(ok=True, discount_amount=round_money(raw, places))
