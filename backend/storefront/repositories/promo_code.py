"""
PromoCode repository for data access operations.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, or_, select, update

from storefront.models.promo_code import PromoCode
from storefront.repositories.base import BaseRepository


class PromoCodeRepository(BaseRepository[PromoCode]):
    """Repository for PromoCode model operations."""

    model = PromoCode

    async def get_by_code(self, code: str) -> Optional[PromoCode]:
        """Case-insensitive lookup."""
        stmt = select(PromoCode).where(func.upper(PromoCode.code) == code.strip().upper())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> list[PromoCode]:
        stmt = select(PromoCode).order_by(PromoCode.created_at.desc(), PromoCode.code)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def consume_usage(self, promo: PromoCode) -> bool:
        """
        Count one redemption, only while the usage limit allows it.

        Check and increment happen in one conditional UPDATE. Returns False
        when the limit was already reached.
        """
        stmt = (
            update(PromoCode)
            .where(
                PromoCode.id == promo.id,
                or_(
                    PromoCode.usage_limit.is_(None),
                    PromoCode.usage_count < PromoCode.usage_limit,
                ),
            )
            .values(usage_count=PromoCode.usage_count + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.refresh(promo)
        return result.rowcount == 1

    async def get_stats(self, now: Optional[datetime] = None) -> dict:
        """Totals for the admin promo code screen."""
        now = now or datetime.now(timezone.utc)

        total = await self.count()
        active_stmt = select(func.count()).select_from(PromoCode).where(
            PromoCode.is_active.is_(True),
            PromoCode.valid_from <= now,
            PromoCode.valid_to >= now,
        )
        expired_stmt = select(func.count()).select_from(PromoCode).where(PromoCode.valid_to < now)
        usage_stmt = select(func.coalesce(func.sum(PromoCode.usage_count), 0))

        return {
            "total": total,
            "active": (await self.session.execute(active_stmt)).scalar() or 0,
            "expired": (await self.session.execute(expired_stmt)).scalar() or 0,
            "total_usage": (await self.session.execute(usage_stmt)).scalar() or 0,
        }
