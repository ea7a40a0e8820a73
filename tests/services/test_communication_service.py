import pytest
from uuid import uuid4
from datetime import date, timedelta
from fastapi import HTTPException

from school_admin_backend.database.db_enums import AnnouncementAudience, RecipientType
from school_admin_backend.models import communications as comm_models
from school_admin_backend.services.communication_service import CommunicationService


@pytest.mark.anyio
class TestNotifications:

    async def test_unread_filter_and_mark_read(self, communication_service: CommunicationService):
        recipient = uuid4()
        for title in ("Fees due", "Sports day"):
            await communication_service.create_notification(comm_models.NotificationCreate(
                recipient_id=recipient, recipient_type=RecipientType.PARENT, title=title, message=title,
            ))

        notifications = await communication_service.list_notifications(recipient)
        assert len(notifications) == 2

        read = await communication_service.mark_notification_read(notifications[0].id)
        assert read.is_read is True
        assert read.read_at is not None

        unread = await communication_service.list_notifications(recipient, unread_only=True)
        assert [n.id for n in unread] == [notifications[1].id]

    async def test_mark_unknown_notification(self, communication_service: CommunicationService):
        with pytest.raises(HTTPException) as e:
            await communication_service.mark_notification_read(uuid4())
        assert e.value.status_code == 404


@pytest.mark.anyio
class TestAnnouncements:

    async def test_audience_and_publication_window(self, communication_service: CommunicationService):
        today = date.today()
        for title, audience, publish, expiry in (
            ("Everyone", AnnouncementAudience.ALL, None, None),
            ("Parents meeting", AnnouncementAudience.PARENTS, None, None),
            ("Staff only", AnnouncementAudience.TEACHERS, None, None),
            ("Expired", AnnouncementAudience.ALL, today - timedelta(days=10), today - timedelta(days=1)),
            ("Scheduled", AnnouncementAudience.ALL, today + timedelta(days=3), None),
        ):
            await communication_service.create_announcement(comm_models.AnnouncementCreate(
                title=title, body=title, audience=audience, publish_date=publish, expiry_date=expiry,
            ))

        for_parents = await communication_service.list_announcements("parent", today=today)
        assert sorted(a.title for a in for_parents) == ["Everyone", "Parents meeting"]

        everything = await communication_service.list_announcements(today=today)
        assert len(everything) == 3

    async def test_deleted_announcement_is_hidden(self, communication_service: CommunicationService):
        announcement = await communication_service.create_announcement(comm_models.AnnouncementCreate(
            title="Closing early", body="School closes at noon."
        ))
        await communication_service.delete_announcement(announcement.id)

        assert await communication_service.list_announcements() == []
        with pytest.raises(HTTPException) as e:
            await communication_service.delete_announcement(announcement.id)
        assert e.value.status_code == 404
