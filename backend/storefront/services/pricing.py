"""
Checkout arithmetic.

All amounts are Decimal and rounded half-up to the currency's minor unit.
The client never supplies totals; they are always recomputed here from the
frozen item snapshot.
"""
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from storefront.core.config import settings

ZERO = Decimal("0")


def round_money(amount: Decimal, places: Optional[int] = None) -> Decimal:
    """Round half-up to `places` decimals (defaults to the configured currency)."""
    if places is None:
        places = settings.currency_decimal_places
    exponent = Decimal(1).scaleb(-places)
    return Decimal(amount).quantize(exponent, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineSnapshot:
    """
    Price and quantity of one order line, captured at purchase time.

    `unit_price` is already rounded to the currency's minor unit, so the
    subtotal is exactly the sum of line totals.
    """

    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    discount: Decimal
    shipping_cost: Decimal
    tax_amount: Decimal
    total_amount: Decimal


def shipping_cost_for(
    total_quantity: int,
    *,
    flat_rate: Optional[Decimal] = None,
    free_min_quantity: Optional[int] = None,
) -> Decimal:
    """Flat-rate shipping, free once the cart holds enough items."""
    flat_rate = settings.shipping_flat_rate if flat_rate is None else flat_rate
    if free_min_quantity is None:
        free_min_quantity = settings.free_shipping_min_quantity
    if free_min_quantity > 0 and total_quantity >= free_min_quantity:
        return ZERO
    return Decimal(flat_rate)


def compute_totals(
    lines: Iterable[LineSnapshot],
    discount: Decimal = ZERO,
    *,
    shipping_cost: Optional[Decimal] = None,
    tax_rate: Optional[Decimal] = None,
    places: Optional[int] = None,
) -> OrderTotals:
    """
    Compute order totals.

    total = subtotal - discount + shipping + tax, where tax applies to the
    discounted subtotal. The discount never exceeds the subtotal.
    """
    lines = list(lines)
    tax_rate = settings.tax_rate if tax_rate is None else tax_rate

    subtotal = round_money(sum((line.line_total for line in lines), ZERO), places)
    discount = min(round_money(max(discount, ZERO), places), subtotal)

    if shipping_cost is None:
        shipping_cost = shipping_cost_for(sum(line.quantity for line in lines))
    shipping_cost = round_money(shipping_cost, places)

    tax_amount = round_money((subtotal - discount) * Decimal(tax_rate), places)
    total = subtotal - discount + shipping_cost + tax_amount

    return OrderTotals(
        subtotal=subtotal,
        discount=discount,
        shipping_cost=shipping_cost,
        tax_amount=tax_amount,
        total_amount=total,
    )
