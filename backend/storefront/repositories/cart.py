"""
Cart repository. Works in CartLine values; rows are an implementation detail.
"""
from collections.abc import Iterable

from sqlalchemy import delete, select

from storefront.models.cart import CartItem
from storefront.repositories.base import BaseRepository
from storefront.services.cart_merge import CartLine


class CartRepository(BaseRepository[CartItem]):
    """Repository for a user's server-side cart."""

    model = CartItem

    async def get_lines(self, user_id: str) -> list[CartLine]:
        stmt = (
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.position, CartItem.product_id)
        )
        result = await self.session.execute(stmt)
        return [
            CartLine(
                product_id=row.product_id,
                quantity=row.quantity,
                color=row.color,
                size=row.size,
            )
            for row in result.scalars().all()
        ]

    async def replace_lines(self, user_id: str, lines: Iterable[CartLine]) -> list[CartLine]:
        """Overwrite the whole cart (last write wins)."""
        lines = list(lines)
        await self.clear(user_id)
        self.session.add_all(
            CartItem(
                user_id=user_id,
                product_id=line.product_id,
                quantity=line.quantity,
                color=line.color,
                size=line.size,
                position=position,
            )
            for position, line in enumerate(lines)
        )
        await self.session.flush()
        return lines

    async def clear(self, user_id: str) -> None:
        await self.session.execute(delete(CartItem).where(CartItem.user_id == user_id))
        await self.session.flush()
