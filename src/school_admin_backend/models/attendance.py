'''
Pydantic models for attendance marking.
'''
import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from ..database.db_enums import AttendanceSession, AttendanceStatus


class AttendanceMark(BaseModel):
    student_id: UUID
    date: datetime.date
    status: AttendanceStatus
    session: AttendanceSession = AttendanceSession.FULL_DAY
    remarks: Optional[str] = None
    marked_by: Optional[UUID] = None


class BulkAttendanceMark(BaseModel):
    """
    Records are kept as raw dicts so each one can fail independently
    instead of rejecting the whole request.
    """
    records: list[dict]
    marked_by: Optional[UUID] = None


class AttendanceRead(BaseModel):
    id: UUID
    student_id: UUID
    date: datetime.date
    session: AttendanceSession
    status: AttendanceStatus
    class_id: Optional[UUID] = None
    remarks: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AttendanceSummary(BaseModel):
    student_id: UUID
    total_days: int
    present: int
    absent: int
    late: int
    excused: int
    attendance_rate: float
