'''

'''
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..database.db_enums import AnnouncementAudience, NotificationType, RecipientType


class NotificationCreate(BaseModel):
    recipient_id: UUID
    recipient_type: RecipientType
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    notification_type: NotificationType = NotificationType.INFO


class NotificationRead(NotificationCreate):
    id: UUID
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    audience: AnnouncementAudience = AnnouncementAudience.ALL
    created_by: Optional[UUID] = None
    publish_date: Optional[date] = None
    expiry_date: Optional[date] = None


class AnnouncementRead(AnnouncementCreate):
    id: UUID
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
