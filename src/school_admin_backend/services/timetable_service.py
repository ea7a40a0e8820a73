'''
Weekly timetable: periods, rooms, scheduled entries and substitutions.

The conflict validator guarantees that, among active entries sharing
(period, day, academic year), no class, no teacher and no room appears
twice. The partial unique indexes on timetable_entries enforce the same
rule in the database, so a concurrent double booking that slips past the
pre-check is still rejected at insert time.
'''
from datetime import date
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, HTTPException
from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.exceptions import ConflictError, InputValidationError, NotFoundError
from ..common.logger import log
from ..database import models as db_models
from ..database.db_enums import DayOfWeek, SubstitutionStatus
from ..database.engine import get_db_session
from ..database.utils import savepoint
from ..models import timetable as timetable_models

CLASS_CONFLICT = "Class already has a period scheduled at this time"
TEACHER_CONFLICT = "Teacher already has a class scheduled at this time"
ROOM_CONFLICT = "Room already occupied at this time"
SLOT_CONFLICT = "Timetable slot already taken"

DAY_ORDER = case(
    {day.value: index for index, day in enumerate(DayOfWeek)},
    value=db_models.TimetableEntries.day_of_week,
)


class TimeTableService:
    """
    Service for all business logic related to the weekly timetable.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    # --- Conflict Validation ---

    async def _slot_taken(
        self,
        column,
        value: UUID,
        period_id: UUID,
        day_of_week: str,
        academic_year: str,
        exclude_id: Optional[UUID],
    ) -> bool:
        Entry = db_models.TimetableEntries
        stmt = select(Entry.id).filter(
            column == value,
            Entry.period_id == period_id,
            Entry.day_of_week == day_of_week,
            Entry.academic_year == academic_year,
            Entry.is_active.is_(True),
        )
        if exclude_id is not None:
            stmt = stmt.filter(Entry.id != exclude_id)
        result = await self.db.execute(stmt.limit(1))
        return result.first() is not None

    async def check_conflicts(
        self,
        class_id: UUID,
        teacher_id: UUID,
        room_id: Optional[UUID],
        period_id: UUID,
        day_of_week: str,
        academic_year: str,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        """
        Raises ConflictError for the first clash found, checking the class,
        then the teacher, then the room. The room is not checked when
        room_id is None. `exclude_id` lets an entry be re-validated
        against everything except itself.
        """
        day = DayOfWeek(day_of_week).value
        Entry = db_models.TimetableEntries

        # 1. Class double booking
        if await self._slot_taken(Entry.class_id, class_id, period_id, day, academic_year, exclude_id):
            log.warning(f"Class {class_id} already booked on {day} period {period_id} ({academic_year}).")
            raise ConflictError(CLASS_CONFLICT)

        # 2. Teacher double booking
        if await self._slot_taken(Entry.teacher_id, teacher_id, period_id, day, academic_year, exclude_id):
            log.warning(f"Teacher {teacher_id} already booked on {day} period {period_id} ({academic_year}).")
            raise ConflictError(TEACHER_CONFLICT)

        # 3. Room double booking
        if room_id is not None:
            if await self._slot_taken(Entry.room_id, room_id, period_id, day, academic_year, exclude_id):
                log.warning(f"Room {room_id} already booked on {day} period {period_id} ({academic_year}).")
                raise ConflictError(ROOM_CONFLICT)

    # --- Internal Fetchers ---

    async def _ensure_exists(self, model, row_id: UUID, label: str):
        row = await self.db.get(model, row_id)
        if row is None or not row.is_active:
            log.warning(f"Referenced {label} {row_id} does not exist.")
            raise NotFoundError(f"{label} not found")
        return row

    async def _get_entry_by_id_internal(self, entry_id: UUID) -> db_models.TimetableEntries:
        """
        Fetches a single active timetable entry. Raises 404 if not found.
        """
        stmt = select(db_models.TimetableEntries).filter(
            db_models.TimetableEntries.id == entry_id,
            db_models.TimetableEntries.is_active.is_(True),
        )
        result = await self.db.execute(stmt)
        entry = result.scalars().first()
        if not entry:
            log.warning(f"Tried to fetch non-existing timetable entry: {entry_id}")
            raise NotFoundError("Timetable entry not found")
        return entry

    # --- Periods ---

    async def create_period(self, data: timetable_models.PeriodCreate) -> db_models.Periods:
        log.info(f"Creating period #{data.period_number} ({data.start_time}-{data.end_time}).")
        period = db_models.Periods(**data.model_dump())
        async with savepoint(self.db, "Period number already exists"):
            self.db.add(period)
        return period

    async def list_periods(self) -> list[db_models.Periods]:
        stmt = select(db_models.Periods).filter(
            db_models.Periods.is_active.is_(True)
        ).order_by(db_models.Periods.period_number)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update_period(self, period_id: UUID, data: timetable_models.PeriodUpdate) -> db_models.Periods:
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise InputValidationError("No fields to update")

        period = await self._ensure_exists(db_models.Periods, period_id, "Period")
        start = update_data.get('start_time', period.start_time)
        end = update_data.get('end_time', period.end_time)
        if end <= start:
            raise InputValidationError("Period end time must be after its start time")

        async with savepoint(self.db, "Period number already exists"):
            for key, value in update_data.items():
                setattr(period, key, value)
        log.info(f"Period {period_id} updated: {list(update_data)}")
        return period

    # --- Rooms ---

    async def create_room(self, data: timetable_models.RoomCreate) -> db_models.Rooms:
        log.info(f"Creating room {data.room_number}.")
        room = db_models.Rooms(**data.model_dump())
        async with savepoint(self.db, "Room number already exists"):
            self.db.add(room)
        return room

    async def list_rooms(self) -> list[db_models.Rooms]:
        stmt = select(db_models.Rooms).filter(
            db_models.Rooms.is_active.is_(True)
        ).order_by(db_models.Rooms.room_number)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # --- Timetable Entries ---

    async def create_entry(
        self, data: timetable_models.TimetableEntryCreate
    ) -> db_models.TimetableEntries:
        """
        Schedules a new entry after validating that its slot is free for
        the class, the teacher and (when given) the room.
        """
        log.info(f"Scheduling class {data.class_id} on {data.day_of_week.value} period {data.period_id}.")
        try:
            # 1. Referenced rows must exist
            await self._ensure_exists(db_models.Classes, data.class_id, "Class")
            await self._ensure_exists(db_models.Subjects, data.subject_id, "Subject")
            await self._ensure_exists(db_models.Teachers, data.teacher_id, "Teacher")
            await self._ensure_exists(db_models.Periods, data.period_id, "Period")
            if data.room_id is not None:
                await self._ensure_exists(db_models.Rooms, data.room_id, "Room")

            # 2. Slot must be free
            await self.check_conflicts(
                class_id=data.class_id,
                teacher_id=data.teacher_id,
                room_id=data.room_id,
                period_id=data.period_id,
                day_of_week=data.day_of_week.value,
                academic_year=data.academic_year,
            )

            # 3. Insert
            entry = db_models.TimetableEntries(
                class_id=data.class_id,
                subject_id=data.subject_id,
                teacher_id=data.teacher_id,
                room_id=data.room_id,
                period_id=data.period_id,
                day_of_week=data.day_of_week.value,
                academic_year=data.academic_year,
            )
            async with savepoint(self.db, SLOT_CONFLICT):
                self.db.add(entry)

            log.info(f"Timetable entry {entry.id} created.")
            return entry

        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error creating timetable entry: {e}", exc_info=True)
            raise

    async def get_entry(self, entry_id: UUID) -> db_models.TimetableEntries:
        return await self._get_entry_by_id_internal(entry_id)

    async def list_entries(
        self, filters: Optional[timetable_models.TimetableFilters] = None
    ) -> list[db_models.TimetableEntries]:
        """Active entries ordered by weekday, then by period number."""
        Entry = db_models.TimetableEntries
        stmt = (
            select(Entry)
            .join(db_models.Periods, Entry.period_id == db_models.Periods.id)
            .filter(Entry.is_active.is_(True))
        )
        if filters is not None:
            if filters.class_id:
                stmt = stmt.filter(Entry.class_id == filters.class_id)
            if filters.teacher_id:
                stmt = stmt.filter(Entry.teacher_id == filters.teacher_id)
            if filters.room_id:
                stmt = stmt.filter(Entry.room_id == filters.room_id)
            if filters.day_of_week:
                stmt = stmt.filter(Entry.day_of_week == filters.day_of_week.value)
            if filters.academic_year:
                stmt = stmt.filter(Entry.academic_year == filters.academic_year)

        stmt = stmt.order_by(DAY_ORDER, db_models.Periods.period_number)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update_entry(
        self, entry_id: UUID, data: timetable_models.TimetableEntryUpdate
    ) -> db_models.TimetableEntries:
        """
        Applies a partial update. Any change to the teacher, room, period or
        day re-runs the conflict check with the entry itself excluded.
        """
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise InputValidationError("No fields to update")
        if 'day_of_week' in update_data and update_data['day_of_week'] is not None:
            update_data['day_of_week'] = update_data['day_of_week'].value
        for required in ('subject_id', 'teacher_id', 'period_id', 'day_of_week'):
            if required in update_data and update_data[required] is None:
                raise InputValidationError(f"{required} cannot be null")

        entry = await self._get_entry_by_id_internal(entry_id)
        log.info(f"Updating timetable entry {entry_id} with {list(update_data)}")

        references = (
            ('subject_id', db_models.Subjects, "Subject"),
            ('teacher_id', db_models.Teachers, "Teacher"),
            ('period_id', db_models.Periods, "Period"),
            ('room_id', db_models.Rooms, "Room"),
        )
        for field, model, label in references:
            if update_data.get(field) is not None:
                await self._ensure_exists(model, update_data[field], label)

        slot_fields = {'teacher_id', 'room_id', 'period_id', 'day_of_week'}
        if slot_fields & update_data.keys():
            await self.check_conflicts(
                class_id=entry.class_id,
                teacher_id=update_data.get('teacher_id', entry.teacher_id),
                room_id=update_data.get('room_id', entry.room_id),
                period_id=update_data.get('period_id', entry.period_id),
                day_of_week=update_data.get('day_of_week', entry.day_of_week),
                academic_year=entry.academic_year,
                exclude_id=entry.id,
            )

        async with savepoint(self.db, SLOT_CONFLICT):
            for key, value in update_data.items():
                setattr(entry, key, value)
        return entry

    async def delete_entry(self, entry_id: UUID) -> None:
        """Soft delete: the entry stops blocking its slot."""
        entry = await self._get_entry_by_id_internal(entry_id)
        async with savepoint(self.db, SLOT_CONFLICT):
            entry.is_active = False
        log.info(f"Timetable entry {entry_id} deactivated.")

    # --- Substitutions ---

    async def create_substitution(
        self,
        data: timetable_models.SubstitutionCreate,
        created_by: Optional[UUID] = None,
    ) -> db_models.Substitutions:
        entry = await self._get_entry_by_id_internal(data.timetable_entry_id)
        await self._ensure_exists(db_models.Teachers, data.substitute_teacher_id, "Teacher")

        if data.substitute_teacher_id == entry.teacher_id:
            raise InputValidationError("Substitute teacher must differ from the scheduled teacher")

        weekday = DayOfWeek.from_date(data.date).value
        if weekday != entry.day_of_week:
            raise InputValidationError(f"{data.date} is a {weekday}, the entry is scheduled on {entry.day_of_week}")

        # The substitute must be free in their own timetable and not already covering that period.
        Entry = db_models.TimetableEntries
        if await self._slot_taken(Entry.teacher_id, data.substitute_teacher_id,
                                  entry.period_id, weekday, entry.academic_year, None):
            raise ConflictError("Substitute teacher is not available at this time")

        Sub = db_models.Substitutions
        stmt = select(Sub.id).filter(
            Sub.substitute_teacher_id == data.substitute_teacher_id,
            Sub.date == data.date,
            Sub.period_id == entry.period_id,
            Sub.status != SubstitutionStatus.CANCELLED.value,
        ).limit(1)
        if (await self.db.execute(stmt)).first() is not None:
            raise ConflictError("Substitute teacher is not available at this time")

        substitution = db_models.Substitutions(
            timetable_entry_id=entry.id,
            original_teacher_id=entry.teacher_id,
            substitute_teacher_id=data.substitute_teacher_id,
            date=data.date,
            period_id=entry.period_id,
            reason=data.reason,
            status=SubstitutionStatus.PENDING.value,
            created_by=created_by,
        )
        async with savepoint(self.db, "Substitution could not be recorded"):
            self.db.add(substitution)
        log.info(f"Substitution {substitution.id} created for entry {entry.id} on {data.date}.")
        return substitution

    async def list_substitutions(
        self, on: Optional[date] = None, teacher_id: Optional[UUID] = None
    ) -> list[db_models.Substitutions]:
        Sub = db_models.Substitutions
        stmt = select(Sub)
        if on is not None:
            stmt = stmt.filter(Sub.date == on)
        if teacher_id is not None:
            stmt = stmt.filter(
                (Sub.substitute_teacher_id == teacher_id) | (Sub.original_teacher_id == teacher_id)
            )
        result = await self.db.execute(stmt.order_by(Sub.date.desc()))
        return list(result.scalars().all())

    async def update_substitution_status(self, substitution_id: UUID, new_status: str) -> db_models.Substitutions:
        if new_status not in SubstitutionStatus.get_all_names():
            raise InputValidationError("Invalid status")

        substitution = await self.db.get(db_models.Substitutions, substitution_id)
        if substitution is None:
            raise NotFoundError("Substitution not found")

        async with savepoint(self.db, "Substitution could not be updated"):
            substitution.status = new_status
        log.info(f"Substitution {substitution_id} is now {new_status}.")
        return substitution
