"""
Product repository for data access operations.
"""
from collections.abc import Iterable
from typing import Optional

from sqlalchemy import func, select, update

from storefront.models.product import Product
from storefront.repositories.base import BaseRepository, parse_uuid


class ProductRepository(BaseRepository[Product]):
    """Repository for Product model operations."""

    model = Product

    async def get_many(self, product_ids: Iterable[str]) -> dict[str, Product]:
        """Load products by id; unknown or malformed ids are simply absent."""
        keys = {key for key in (parse_uuid(pid) for pid in product_ids) if key is not None}
        if not keys:
            return {}
        stmt = select(Product).where(Product.id.in_(keys))
        result = await self.session.execute(stmt)
        return {str(p.id): p for p in result.scalars().all()}

    async def list_active(
        self,
        *,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Product], int]:
        """Active products, newest first. Returns (products, total_count)."""
        base_query = select(Product).where(Product.is_active.is_(True))
        if category:
            base_query = base_query.where(func.lower(Product.category) == category.lower())
        if featured is not None:
            base_query = base_query.where(Product.featured.is_(featured))

        count_stmt = select(func.count()).select_from(base_query.subquery())
        total = (await self.session.execute(count_stmt)).scalar() or 0

        stmt = base_query.order_by(Product.created_at.desc()).offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def decrement_stock(self, product_id: str, quantity: int) -> bool:
        """Atomically take `quantity` units out of stock, never below zero."""
        key = parse_uuid(product_id)
        if key is None:
            return False
        stmt = (
            update(Product)
            .where(Product.id == key, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
