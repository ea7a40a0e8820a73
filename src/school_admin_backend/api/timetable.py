'''
API endpoints for periods, rooms, timetable entries and substitutions.
'''
from datetime import date
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from ..database.db_enums import DayOfWeek
from ..models import timetable as timetable_models
from ..services.timetable_service import TimeTableService


class TimetableAPI:
    """
    A class to encapsulate endpoints for the weekly timetable.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/timetable",
            tags=["Timetable"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        # Periods
        self.router.add_api_route(
                "/periods",
                self.list_periods,
                methods=["GET"],
                response_model=list[timetable_models.PeriodRead])
        self.router.add_api_route(
                "/periods",
                self.create_period,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=timetable_models.PeriodRead)
        self.router.add_api_route(
                "/periods/{period_id}",
                self.update_period,
                methods=["PATCH"],
                response_model=timetable_models.PeriodRead)
        # Rooms
        self.router.add_api_route(
                "/rooms",
                self.list_rooms,
                methods=["GET"],
                response_model=list[timetable_models.RoomRead])
        self.router.add_api_route(
                "/rooms",
                self.create_room,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=timetable_models.RoomRead)
        # Entries
        self.router.add_api_route(
                "/entries",
                self.list_entries,
                methods=["GET"],
                response_model=list[timetable_models.TimetableEntryRead])
        self.router.add_api_route(
                "/entries",
                self.create_entry,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=timetable_models.TimetableEntryRead)
        self.router.add_api_route(
                "/entries/{entry_id}",
                self.get_entry,
                methods=["GET"],
                response_model=timetable_models.TimetableEntryRead)
        self.router.add_api_route(
                "/entries/{entry_id}",
                self.update_entry,
                methods=["PATCH"],
                response_model=timetable_models.TimetableEntryRead)
        self.router.add_api_route(
                "/entries/{entry_id}",
                self.delete_entry,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)
        # Substitutions
        self.router.add_api_route(
                "/substitutions",
                self.list_substitutions,
                methods=["GET"],
                response_model=list[timetable_models.SubstitutionRead])
        self.router.add_api_route(
                "/substitutions",
                self.create_substitution,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=timetable_models.SubstitutionRead)
        self.router.add_api_route(
                "/substitutions/{substitution_id}/status",
                self.update_substitution_status,
                methods=["PATCH"],
                response_model=timetable_models.SubstitutionRead)

    async def list_periods(
        self,
        timetable_service: Annotated[TimeTableService, Depends(TimeTableService)]
    ) -> list[Any]:
        return await timetable_service.list_periods()

    async def create_period(
        self,
        period_data: timetable_models.PeriodCreate,
        timetable_service: Annotated[TimeTableService, Depends(TimeTableService)]
    ) -> Any:
        return await timetable_service.create_period(period_data)

    async def update_period(
        self,
        period_id: UUID,
        update_data: timetable_models.PeriodUpdate,
        timetable_service: Annotated[TimeTableService, Depends(TimeTableService)]
    ) -> Any:
        return await timetable_service.update_period(period_id, update_data)

    async def list_rooms(
        self,
        timetable_service: Annotated[TimeTableService, Depends(TimeTableService)]
    ) -> list[Any]:
        return await timetable_service.list_rooms()

    async def create_room(
        self,
        room_data: timetable_models.RoomCreate,
        timetable_service: Annotated[TimeTableService, Depends(TimeTableService)]
    ) -> Any:
        return await timetable_service.create_room(room_data)

    async def list_entries(
        self,
        timetable_service: Annotated[TimeTableService, Depends(TimeTableService)],
        class_id: Annotated[UUID | None, Query(description="Optional filter for Class ID")] = None,
        teacher_id: Annotated[UUID | None, Query(description="Optional filter for Teacher ID")] = None,
        room_id: Annotated[UUID | None, Query(description="Optional filter for Room ID")] = None,
        day_of_week: Annotated[DayOfWeek | None, Query()] = None,
        academic_year: Annotated[str | None, Query()] = None,
    ) -> list[Any]:
        """
        Lists active entries ordered by weekday and period.
        """
        filters = timetable_models.TimetableFilters(
            class_id=class_id,
            teacher_id=teacher_id,
            room_id=room_id,
            day_of_week=day_of_week,
            academic_year=academic_year,
        )
        return await timetable_service.list_entries(filters)

    async def create_entry(
        self,
        entry_data: timetable_models.TimetableEntryCreate,
        timetable_service: Annotated[TimeTableService, Depends(TimeTableService)]
    ) -> Any:
        """
        Schedules a new entry. Returns 400 if the class, teacher or room
        is already booked in that slot.
        """
        return await timetable_service.create_entry(entry_data)

    async def get_entry(
        self,
        entry_id: UUID,
        timetable_service: Annotated[TimeTableService, Depends(TimeTableService)]
    ) -> Any:
        return await timetable_service.get_entry(entry_id)

    async def update_entry(
        self,
        entry_id: UUID,
        update_data: timetable_models.TimetableEntryUpdate,
        timetable_service: Annotated[TimeTableService, Depends(TimeTableService)]
    ) -> Any:
        return await timetable_service.update_entry(entry_id, update_data)

    async def delete_entry(
        self,
        entry_id: UUID,
        timetable_service: Annotated[TimeTableService, Depends(TimeTableService)]
    ):
        await timetable_service.delete_entry(entry_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    async def list_substitutions(
        self,
        timetable_service: Annotated[TimeTableService, Depends(TimeTableService)],
        on: Annotated[date | None, Query(alias="date")] = None,
        teacher_id: Annotated[UUID | None, Query()] = None,
    ) -> list[Any]:
        return await timetable_service.list_substitutions(on, teacher_id)

    async def create_substitution(
        self,
        substitution_data: timetable_models.SubstitutionCreate,
        timetable_service: Annotated[TimeTableService, Depends(TimeTableService)]
    ) -> Any:
        return await timetable_service.create_substitution(substitution_data)

    async def update_substitution_status(
        self,
        substitution_id: UUID,
        status_data: timetable_models.SubstitutionStatusUpdate,
        timetable_service: Annotated[TimeTableService, Depends(TimeTableService)]
    ) -> Any:
        return await timetable_service.update_substitution_status(substitution_id, status_data.status)


# Instantiate the class and export its router
timetable_api = TimetableAPI()
router = timetable_api.router
