"""
Cart service - server-side cart operations and login-time reconciliation.
"""
from collections.abc import Iterable
from dataclasses import replace
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.errors import NotFoundError
from storefront.core.logging import get_logger
from storefront.repositories.cart import CartRepository
from storefront.repositories.base import parse_uuid
from storefront.repositories.product import ProductRepository
from storefront.schemas.cart import CartLineResponse, CartResponse
from storefront.services.cart_merge import CartLine, add_line, merge_carts, normalize_variant
from storefront.services.pricing import ZERO, round_money, shipping_cost_for

logger = get_logger(__name__)


def _canonical(line: CartLine) -> Optional[CartLine]:
    """Line with its product id in canonical UUID form, or None if malformed."""
    key = parse_uuid(line.product_id)
    if key is None:
        return None
    return replace(line, product_id=str(key))


class CartService:
    """Reads and writes a single user's cart."""

    def __init__(self, session: AsyncSession) -> None:
        self.carts = CartRepository(session)
        self.products = ProductRepository(session)

    async def get_cart(self, user_id: str) -> CartResponse:
        """Cart joined with live product data; lines for deleted products are hidden."""
        lines = await self.carts.get_lines(user_id)
        return await self._render(lines)

    async def add_item(self, user_id: str, line: CartLine, *, replace_quantity: bool = False) -> CartResponse:
        """Add one line; an existing variant gets its quantity increased (or replaced)."""
        requested_id = line.product_id
        line = _canonical(line)
        products = await self.products.get_many([line.product_id]) if line else {}
        if line is None or line.product_id not in products:
            raise NotFoundError("Product", requested_id)

        current = await self.carts.get_lines(user_id)
        updated = add_line(current, line, replace_quantity=replace_quantity)
        await self.carts.replace_lines(user_id, updated)

        logger.info(
            "Cart item saved",
            user_id=user_id,
            product_id=line.product_id,
            quantity=line.quantity,
            replace=replace_quantity,
        )
        return await self._render(updated)

    async def merge(self, user_id: str, local_lines: Iterable[CartLine]) -> CartResponse:
        """
        Merge a device-held cart into the server cart and persist the result.

        Lines pointing at products that no longer exist are dropped.
        """
        local_lines = [line for line in map(_canonical, local_lines) if line is not None]
        server_lines = await self.carts.get_lines(user_id)
        merged = merge_carts(server_lines, local_lines)

        products = await self.products.get_many(line.product_id for line in merged)
        merged = [line for line in merged if line.product_id in products]
        await self.carts.replace_lines(user_id, merged)

        logger.info(
            "Cart merged",
            user_id=user_id,
            server_lines=len(server_lines),
            local_lines=len(local_lines),
            merged_lines=len(merged),
        )
        return await self._render(merged, products)

    async def remove_item(
        self,
        user_id: str,
        product_id: str,
        color: Optional[str] = None,
        size: Optional[str] = None,
    ) -> CartResponse:
        """
        Remove lines for a product.

        With a color or size only that variant goes; otherwise every variant
        of the product is removed.
        """
        color, size = normalize_variant(color), normalize_variant(size)
        key = parse_uuid(product_id)
        product_id = str(key) if key else product_id
        current = await self.carts.get_lines(user_id)

        def matches(line: CartLine) -> bool:
            if line.product_id != product_id:
                return False
            if color and line.color != color:
                return False
            if size and line.size != size:
                return False
            return True

        remaining = [line for line in current if not matches(line)]
        if len(remaining) == len(current):
            raise NotFoundError("Cart item", product_id)

        await self.carts.replace_lines(user_id, remaining)
        return await self._render(remaining)

    async def clear(self, user_id: str) -> CartResponse:
        await self.carts.clear(user_id)
        logger.info("Cart cleared", user_id=user_id)
        return await self._render([])

    async def _render(self, lines: list[CartLine], products: Optional[dict] = None) -> CartResponse:
        if products is None:
            products = await self.products.get_many(line.product_id for line in lines)

        items = []
        subtotal = ZERO
        quantity = 0
        for line in lines:
            product = products.get(line.product_id)
            if product is None:
                continue
            unit_price = round_money(product.effective_price)
            line_total = unit_price * line.quantity
            subtotal += line_total
            quantity += line.quantity
            items.append(
                CartLineResponse(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    color=line.color or None,
                    size=line.size or None,
                    name=product.name,
                    image=product.image,
                    category=product.category,
                    price=Decimal(product.price),
                    sale_price=product.sale_price,
                    unit_price=unit_price,
                    line_total=line_total,
                    in_stock=product.stock >= line.quantity,
                )
            )

        return CartResponse(
            items=items,
            item_count=quantity,
            subtotal=subtotal,
            shipping_cost=shipping_cost_for(quantity) if items else ZERO,
        )
