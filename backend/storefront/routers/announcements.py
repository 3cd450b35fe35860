"""
Announcement banner API routes.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import get_db_session
from storefront.core.errors import NotFoundError, ValidationError
from storefront.core.logging import get_logger
from storefront.core.security import AdminUser
from storefront.repositories.announcement import AnnouncementRepository
from storefront.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementResponse,
    AnnouncementUpdate,
)
from storefront.schemas.common import naive_utc

logger = get_logger(__name__)

router = APIRouter(prefix="/announcements", tags=["announcements"])


async def get_announcement_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> AnnouncementRepository:
    """Dependency to get announcement repository."""
    return AnnouncementRepository(session)


@router.get("", response_model=list[AnnouncementResponse])
async def list_active_announcements(
    repo: Annotated[AnnouncementRepository, Depends(get_announcement_repository)],
) -> list[AnnouncementResponse]:
    """Announcements that are switched on and inside their date window."""
    return [AnnouncementResponse.model_validate(a) for a in await repo.list_active()]


@router.get("/all", response_model=list[AnnouncementResponse])
async def list_all_announcements(
    admin: AdminUser,
    repo: Annotated[AnnouncementRepository, Depends(get_announcement_repository)],
) -> list[AnnouncementResponse]:
    """Every announcement, including switched-off and expired ones."""
    return [AnnouncementResponse.model_validate(a) for a in await repo.list_all()]


@router.post("", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    data: AnnouncementCreate,
    admin: AdminUser,
    repo: Annotated[AnnouncementRepository, Depends(get_announcement_repository)],
) -> AnnouncementResponse:
    announcement = await repo.create(data.model_dump(by_alias=False))
    logger.info("Created announcement", announcement_id=str(announcement.id))
    return AnnouncementResponse.model_validate(announcement)


@router.put("/{announcement_id}", response_model=AnnouncementResponse)
async def update_announcement(
    announcement_id: str,
    data: AnnouncementUpdate,
    admin: AdminUser,
    repo: Annotated[AnnouncementRepository, Depends(get_announcement_repository)],
) -> AnnouncementResponse:
    announcement = await repo.get_by_id(announcement_id)
    if announcement is None:
        raise NotFoundError("Announcement", announcement_id)

    changes = data.model_dump(exclude_unset=True, by_alias=False)
    start = changes.get("start_date", announcement.start_date)
    end = changes.get("end_date", announcement.end_date)
    if start and end and naive_utc(end) <= naive_utc(start):
        raise ValidationError("End date must be after start date")

    announcement = await repo.update(announcement, changes, exclude_none=False)
    return AnnouncementResponse.model_validate(announcement)


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(
    announcement_id: str,
    admin: AdminUser,
    repo: Annotated[AnnouncementRepository, Depends(get_announcement_repository)],
) -> None:
    announcement = await repo.get_by_id(announcement_id)
    if announcement is None:
        raise NotFoundError("Announcement", announcement_id)
    await repo.delete(announcement)
    logger.info("Deleted announcement", announcement_id=announcement_id)
