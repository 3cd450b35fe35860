"""
Order repository for data access operations.
"""
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from storefront.models.order import Order, OrderSequence, OrderStatus, PaymentStatus
from storefront.repositories.base import BaseRepository

PAYMENT_FILTERS = {status.value for status in PaymentStatus}
ORDER_FILTERS = {status.value for status in OrderStatus}


class OrderRepository(BaseRepository[Order]):
    """Repository for Order model operations."""

    model = Order

    async def list_for_user(self, user_id: Optional[str]) -> list[Order]:
        """A customer's orders, newest first. `None` lists every order."""
        stmt = select(Order).order_by(Order.created_at.desc(), Order.order_number.desc())
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_paginated(
        self,
        *,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[Order], int]:
        """
        All orders, newest first, optionally filtered by status.

        pending/verified/rejected filter on payment status; every other value
        filters on fulfillment status. Returns (orders, total_count).
        """
        base_query = select(Order)
        if status and status != "all":
            if status in PAYMENT_FILTERS:
                base_query = base_query.where(Order.payment_status == status)
            else:
                base_query = base_query.where(Order.order_status == status)

        count_stmt = select(func.count()).select_from(base_query.subquery())
        total = (await self.session.execute(count_stmt)).scalar() or 0

        stmt = (
            base_query
            .order_by(Order.created_at.desc(), Order.order_number.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def get_summary(self) -> dict:
        """Order counts per status and revenue from verified payments."""
        total = await self.count()

        payment_stmt = select(Order.payment_status, func.count()).group_by(Order.payment_status)
        payment_counts = dict((await self.session.execute(payment_stmt)).all())

        order_stmt = select(Order.order_status, func.count()).group_by(Order.order_status)
        order_counts = dict((await self.session.execute(order_stmt)).all())

        revenue_stmt = select(func.coalesce(func.sum(Order.total_amount), 0)).where(
            Order.payment_status == PaymentStatus.VERIFIED.value
        )
        revenue = (await self.session.execute(revenue_stmt)).scalar() or 0

        return {
            "total_orders": total,
            "pending_payment": payment_counts.get(PaymentStatus.PENDING.value, 0),
            "rejected_payment": payment_counts.get(PaymentStatus.REJECTED.value, 0),
            "processing": order_counts.get(OrderStatus.PROCESSING.value, 0),
            "shipped": order_counts.get(OrderStatus.SHIPPED.value, 0),
            "delivered": order_counts.get(OrderStatus.DELIVERED.value, 0),
            "cancelled": order_counts.get(OrderStatus.CANCELLED.value, 0),
            "revenue": revenue,
        }

    async def _max_existing_sequence(self, prefix: str, day: str) -> int:
        """Highest sequence already used by orders numbered for `day`."""
        stmt = select(func.max(Order.order_number)).where(
            Order.order_number.like(f"{prefix}-{day}-%")
        )
        last = (await self.session.execute(stmt)).scalar()
        if not last:
            return 0
        try:
            return int(last.rsplit("-", 1)[1])
        except (IndexError, ValueError):
            return 0

    async def allocate_sequence(self, prefix: str, day: str) -> int:
        """
        Atomically allocate the next order sequence number for `day`.

        The counter row is created on first use (seeded from any orders that
        already carry today's prefix), then incremented with a single
        UPDATE ... RETURNING so concurrent checkouts never share a number.
        """
        seed = await self._max_existing_sequence(prefix, day)
        dialect = self.session.get_bind().dialect.name
        insert = pg_insert if dialect == "postgresql" else sqlite_insert
        await self.session.execute(
            insert(OrderSequence)
            .values(day=day, last_value=seed)
            .on_conflict_do_nothing(index_elements=["day"])
        )

        stmt = (
            update(OrderSequence)
            .where(OrderSequence.day == day)
            .values(last_value=OrderSequence.last_value + 1)
            .returning(OrderSequence.last_value)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
