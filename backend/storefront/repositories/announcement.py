"""
Announcement repository for data access operations.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_, select

from storefront.models.announcement import Announcement
from storefront.repositories.base import BaseRepository


class AnnouncementRepository(BaseRepository[Announcement]):
    """Repository for Announcement model operations."""

    model = Announcement

    async def list_active(self, now: Optional[datetime] = None) -> list[Announcement]:
        """Active announcements whose date window (if any) contains `now`."""
        now = now or datetime.now(timezone.utc)
        stmt = (
            select(Announcement)
            .where(
                Announcement.active.is_(True),
                or_(Announcement.start_date.is_(None), Announcement.start_date <= now),
                or_(Announcement.end_date.is_(None), Announcement.end_date >= now),
            )
            .order_by(Announcement.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_all(self) -> list[Announcement]:
        stmt = select(Announcement).order_by(Announcement.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
