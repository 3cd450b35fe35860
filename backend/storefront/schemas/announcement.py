"""
Announcement Pydantic schemas for request/response validation.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from storefront.schemas.common import UtcDatetime


class AnnouncementCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=500)
    link: Optional[str] = None
    active: bool = True
    start_date: Optional[UtcDatetime] = Field(None, alias="startDate")
    end_date: Optional[UtcDatetime] = Field(None, alias="endDate")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    @model_validator(mode="after")
    def end_after_start(self) -> "AnnouncementCreate":
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class AnnouncementUpdate(BaseModel):
    text: Optional[str] = Field(None, min_length=1, max_length=500)
    link: Optional[str] = None
    active: Optional[bool] = None
    start_date: Optional[UtcDatetime] = Field(None, alias="startDate")
    end_date: Optional[UtcDatetime] = Field(None, alias="endDate")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class AnnouncementResponse(BaseModel):
    id: UUID
    text: str
    link: Optional[str] = None
    active: bool
    start_date: Optional[datetime] = Field(None, alias="startDate")
    end_date: Optional[datetime] = Field(None, alias="endDate")
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )
