'''
API endpoints for notifications and announcements.
'''
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from ..database.db_enums import RecipientType
from ..models import communications as comm_models
from ..services.communication_service import CommunicationService


class CommunicationsAPI:
    """
    A class to encapsulate endpoints for Communications.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/communications",
            tags=["Communications"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/notifications",
                self.create_notification,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=comm_models.NotificationRead)
        self.router.add_api_route(
                "/notifications/{recipient_id}",
                self.list_notifications,
                methods=["GET"],
                response_model=list[comm_models.NotificationRead])
        self.router.add_api_route(
                "/notifications/{notification_id}/read",
                self.mark_notification_read,
                methods=["PATCH"],
                response_model=comm_models.NotificationRead)
        self.router.add_api_route(
                "/announcements",
                self.list_announcements,
                methods=["GET"],
                response_model=list[comm_models.AnnouncementRead])
        self.router.add_api_route(
                "/announcements",
                self.create_announcement,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=comm_models.AnnouncementRead)
        self.router.add_api_route(
                "/announcements/{announcement_id}",
                self.delete_announcement,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)

    async def create_notification(
        self,
        notification_data: comm_models.NotificationCreate,
        communication_service: Annotated[CommunicationService, Depends(CommunicationService)]
    ) -> Any:
        return await communication_service.create_notification(notification_data)

    async def list_notifications(
        self,
        recipient_id: UUID,
        communication_service: Annotated[CommunicationService, Depends(CommunicationService)],
        unread_only: Annotated[bool, Query()] = False,
    ) -> list[Any]:
        return await communication_service.list_notifications(recipient_id, unread_only)

    async def mark_notification_read(
        self,
        notification_id: UUID,
        communication_service: Annotated[CommunicationService, Depends(CommunicationService)]
    ) -> Any:
        return await communication_service.mark_notification_read(notification_id)

    async def list_announcements(
        self,
        communication_service: Annotated[CommunicationService, Depends(CommunicationService)],
        recipient_type: Annotated[RecipientType | None, Query()] = None,
    ) -> list[Any]:
        return await communication_service.list_announcements(
            recipient_type.value if recipient_type else None
        )

    async def create_announcement(
        self,
        announcement_data: comm_models.AnnouncementCreate,
        communication_service: Annotated[CommunicationService, Depends(CommunicationService)]
    ) -> Any:
        return await communication_service.create_announcement(announcement_data)

    async def delete_announcement(
        self,
        announcement_id: UUID,
        communication_service: Annotated[CommunicationService, Depends(CommunicationService)]
    ):
        await communication_service.delete_announcement(announcement_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


# Instantiate the class and export its router
communications_api = CommunicationsAPI()
router = communications_api.router
