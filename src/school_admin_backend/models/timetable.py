'''

'''
from datetime import date, datetime, time
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..database.db_enums import DayOfWeek, SubstitutionStatus


# --- Periods ---

class PeriodCreate(BaseModel):
    name: str = Field(..., min_length=1)
    period_number: int = Field(..., ge=1)
    start_time: time
    end_time: time
    is_break: bool = False

    @model_validator(mode='after')
    def check_times(self) -> 'PeriodCreate':
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class PeriodUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_break: Optional[bool] = None


class PeriodRead(BaseModel):
    id: UUID
    name: str
    period_number: int
    start_time: time
    end_time: time
    is_break: bool
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


# --- Rooms ---

class RoomCreate(BaseModel):
    room_number: str = Field(..., min_length=1)
    room_name: Optional[str] = None
    building: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)
    room_type: Optional[str] = None


class RoomRead(RoomCreate):
    id: UUID
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


# --- Timetable Entries ---

class TimetableEntryCreate(BaseModel):
    """
    Payload for scheduling a subject for a class in a weekly slot.
    room_id is optional; a slot without a room never clashes on rooms.
    """
    class_id: UUID
    subject_id: UUID
    teacher_id: UUID
    period_id: UUID
    day_of_week: DayOfWeek
    academic_year: str = Field(..., min_length=4)
    room_id: Optional[UUID] = None


class TimetableEntryUpdate(BaseModel):
    """All fields optional for partial updates (PATCH)."""
    subject_id: Optional[UUID] = None
    teacher_id: Optional[UUID] = None
    period_id: Optional[UUID] = None
    day_of_week: Optional[DayOfWeek] = None
    room_id: Optional[UUID] = None


class TimetableEntryRead(BaseModel):
    id: UUID
    class_id: UUID
    subject_id: UUID
    teacher_id: UUID
    period_id: UUID
    day_of_week: DayOfWeek
    academic_year: str
    room_id: Optional[UUID] = None
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TimetableFilters(BaseModel):
    class_id: Optional[UUID] = None
    teacher_id: Optional[UUID] = None
    room_id: Optional[UUID] = None
    day_of_week: Optional[DayOfWeek] = None
    academic_year: Optional[str] = None


# --- Substitutions ---

class SubstitutionCreate(BaseModel):
    timetable_entry_id: UUID
    substitute_teacher_id: UUID
    date: date
    reason: Optional[str] = None


class SubstitutionStatusUpdate(BaseModel):
    status: str


class SubstitutionRead(BaseModel):
    id: UUID
    timetable_entry_id: UUID
    original_teacher_id: UUID
    substitute_teacher_id: UUID
    date: date
    period_id: UUID
    reason: Optional[str] = None
    status: SubstitutionStatus

    model_config = ConfigDict(from_attributes=True)
