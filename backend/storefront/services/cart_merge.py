"""
Cart line helpers and the login-time cart reconciliation.
"""
from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Optional


def normalize_variant(value: Optional[str]) -> str:
    return (value or "").strip()


@dataclass(frozen=True)
class CartLine:
    """One cart line. Empty color/size means the product has no variant."""

    product_id: str
    quantity: int
    color: str = ""
    size: str = ""

    @classmethod
    def of(
        cls,
        product_id: str,
        quantity: int,
        color: Optional[str] = None,
        size: Optional[str] = None,
    ) -> "CartLine":
        return cls(
            product_id=str(product_id),
            quantity=quantity,
            color=normalize_variant(color),
            size=normalize_variant(size),
        )

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.product_id, self.color, self.size)


def add_line(cart: Iterable[CartLine], line: CartLine, *, replace_quantity: bool = False) -> list[CartLine]:
    """
    Upsert `line` into `cart`.

    Adding a variant that is already present increases its quantity instead of
    duplicating the line; with `replace_quantity` the quantity is overwritten.
    """
    result = list(cart)
    for index, existing in enumerate(result):
        if existing.key == line.key:
            quantity = line.quantity if replace_quantity else existing.quantity + line.quantity
            result[index] = replace(existing, quantity=quantity)
            return result
    result.append(line)
    return result


def merge_carts(server_cart: Iterable[CartLine], local_cart: Iterable[CartLine]) -> list[CartLine]:
    """
    Merge a device-held cart into the server cart after login.

    The server cart is the base and keeps its order. Local lines with a new
    variant key are appended; a key present on both sides keeps the larger
    quantity. Quantities are never summed, so merging a cart with itself
    returns it unchanged.
    """
    merged: list[CartLine] = []
    positions: dict[tuple[str, str, str], int] = {}

    for line in list(server_cart) + list(local_cart):
        if line.quantity < 1:
            continue
        if line.key in positions:
            index = positions[line.key]
            if line.quantity > merged[index].quantity:
                merged[index] = replace(merged[index], quantity=line.quantity)
        else:
            positions[line.key] = len(merged)
            merged.append(line)

    return merged
