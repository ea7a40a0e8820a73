'''
Notifications and announcements.
'''
from datetime import date
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.exceptions import NotFoundError
from ..common.logger import log
from ..database import models as db_models
from ..database.db_enums import AnnouncementAudience
from ..database.engine import get_db_session
from ..database.utils import savepoint
from ..models import communications as comm_models

AUDIENCE_BY_RECIPIENT = {
    'student': AnnouncementAudience.STUDENTS.value,
    'parent': AnnouncementAudience.PARENTS.value,
    'teacher': AnnouncementAudience.TEACHERS.value,
}


class CommunicationService:
    """
    Service for in-app notifications and school-wide announcements.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    # --- Notifications ---

    async def create_notification(self, data: comm_models.NotificationCreate) -> db_models.Notifications:
        notification = db_models.Notifications(
            recipient_id=data.recipient_id,
            recipient_type=data.recipient_type.value,
            title=data.title,
            message=data.message,
            notification_type=data.notification_type.value,
        )
        async with savepoint(self.db, "Notification could not be stored"):
            self.db.add(notification)
        log.info(f"Notification {notification.id} created for {data.recipient_type.value} {data.recipient_id}.")
        return notification

    async def notify_safely(self, data: comm_models.NotificationCreate) -> Optional[db_models.Notifications]:
        """
        Fire-and-forget variant of create_notification for side effects of
        other operations. Failures are logged and never reach the caller.
        """
        try:
            return await self.create_notification(data)
        except Exception as e:
            log.error(f"Failed to send notification to {data.recipient_id}: {e}", exc_info=True)
            return None

    async def list_notifications(self, recipient_id: UUID, unread_only: bool = False) -> list[db_models.Notifications]:
        stmt = select(db_models.Notifications).filter(
            db_models.Notifications.recipient_id == recipient_id
        )
        if unread_only:
            stmt = stmt.filter(db_models.Notifications.is_read.is_(False))
        stmt = stmt.order_by(db_models.Notifications.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def mark_notification_read(self, notification_id: UUID) -> db_models.Notifications:
        notification = await self.db.get(db_models.Notifications, notification_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        if not notification.is_read:
            async with savepoint(self.db, "Notification could not be updated"):
                notification.is_read = True
                notification.read_at = db_models.utcnow()
        return notification

    # --- Announcements ---

    async def create_announcement(self, data: comm_models.AnnouncementCreate) -> db_models.Announcements:
        announcement = db_models.Announcements(
            title=data.title,
            body=data.body,
            audience=data.audience.value,
            created_by=data.created_by,
            publish_date=data.publish_date or date.today(),
            expiry_date=data.expiry_date,
        )
        async with savepoint(self.db, "Announcement could not be stored"):
            self.db.add(announcement)
        log.info(f"Announcement '{data.title}' published to {data.audience.value}.")
        return announcement

    async def list_announcements(
        self, recipient_type: Optional[str] = None, today: Optional[date] = None
    ) -> list[db_models.Announcements]:
        """
        Active, currently published announcements. When `recipient_type`
        is given, only those addressed to everyone or to that group.
        """
        today = today or date.today()
        Ann = db_models.Announcements
        stmt = select(Ann).filter(
            Ann.is_active.is_(True),
            or_(Ann.publish_date.is_(None), Ann.publish_date <= today),
            or_(Ann.expiry_date.is_(None), Ann.expiry_date >= today),
        )
        if recipient_type is not None:
            audience = AUDIENCE_BY_RECIPIENT.get(recipient_type, recipient_type)
            stmt = stmt.filter(Ann.audience.in_([AnnouncementAudience.ALL.value, audience]))
        result = await self.db.execute(stmt.order_by(Ann.created_at.desc()))
        return list(result.scalars().all())

    async def delete_announcement(self, announcement_id: UUID) -> None:
        announcement = await self.db.get(db_models.Announcements, announcement_id)
        if announcement is None or not announcement.is_active:
            raise NotFoundError("Announcement not found")
        async with savepoint(self.db, "Announcement could not be updated"):
            announcement.is_active = False
        log.info(f"Announcement {announcement_id} deactivated.")
