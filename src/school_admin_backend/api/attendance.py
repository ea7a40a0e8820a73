'''
API endpoints for attendance.
'''
from datetime import date
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from ..models import attendance as attendance_models
from ..models.common import BulkResult
from ..services.attendance_service import AttendanceService


class AttendanceAPI:
    """
    A class to encapsulate endpoints for Attendance.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/attendance",
            tags=["Attendance"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.mark_attendance,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=attendance_models.AttendanceRead)
        self.router.add_api_route(
                "/bulk",
                self.bulk_mark_attendance,
                methods=["POST"],
                response_model=BulkResult)
        self.router.add_api_route(
                "/classes/{class_id}",
                self.get_class_attendance,
                methods=["GET"],
                response_model=list[attendance_models.AttendanceRead])
        self.router.add_api_route(
                "/students/{student_id}",
                self.get_student_attendance,
                methods=["GET"],
                response_model=list[attendance_models.AttendanceRead])
        self.router.add_api_route(
                "/students/{student_id}/summary",
                self.get_attendance_summary,
                methods=["GET"],
                response_model=attendance_models.AttendanceSummary)
        self.router.add_api_route(
                "/notify-absences",
                self.notify_parents_of_absence,
                methods=["POST"])

    async def mark_attendance(
        self,
        attendance_data: attendance_models.AttendanceMark,
        attendance_service: Annotated[AttendanceService, Depends(AttendanceService)]
    ) -> Any:
        return await attendance_service.mark_attendance(attendance_data)

    async def bulk_mark_attendance(
        self,
        bulk_data: attendance_models.BulkAttendanceMark,
        attendance_service: Annotated[AttendanceService, Depends(AttendanceService)]
    ) -> Any:
        return await attendance_service.bulk_mark_attendance(bulk_data.records, bulk_data.marked_by)

    async def get_class_attendance(
        self,
        class_id: UUID,
        on: Annotated[date, Query(alias="date")],
        attendance_service: Annotated[AttendanceService, Depends(AttendanceService)]
    ) -> list[Any]:
        return await attendance_service.get_class_attendance(class_id, on)

    async def get_student_attendance(
        self,
        student_id: UUID,
        attendance_service: Annotated[AttendanceService, Depends(AttendanceService)],
        start: Annotated[date | None, Query()] = None,
        end: Annotated[date | None, Query()] = None,
    ) -> list[Any]:
        return await attendance_service.get_student_attendance(student_id, start, end)

    async def get_attendance_summary(
        self,
        student_id: UUID,
        attendance_service: Annotated[AttendanceService, Depends(AttendanceService)],
        start: Annotated[date | None, Query()] = None,
        end: Annotated[date | None, Query()] = None,
    ) -> Any:
        return await attendance_service.get_attendance_summary(student_id, start, end)

    async def notify_parents_of_absence(
        self,
        on: Annotated[date, Query(alias="date")],
        attendance_service: Annotated[AttendanceService, Depends(AttendanceService)]
    ):
        notified = await attendance_service.notify_parents_of_absence(on)
        return {"notified": notified}


# Instantiate the class and export its router
attendance_api = AttendanceAPI()
router = attendance_api.router
