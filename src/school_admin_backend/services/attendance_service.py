'''
Daily attendance: marking (single and bulk), queries, summaries and
parent notifications for absences.
'''
from datetime import date
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.exceptions import InputValidationError, NotFoundError
from ..common.logger import log
from ..database import models as db_models
from ..database.db_enums import AttendanceStatus, NotificationType, RecipientType
from ..database.engine import get_db_session
from ..database.utils import savepoint
from ..models import attendance as attendance_models
from ..models import communications as comm_models
from ..models.common import BulkFailure, BulkResult
from .communication_service import CommunicationService


class AttendanceService:
    """
    Service for all business logic related to attendance.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        communication_service: Annotated[CommunicationService, Depends(CommunicationService)],
    ):
        self.db = db
        self.communication_service = communication_service

    async def mark_attendance(self, data: attendance_models.AttendanceMark) -> db_models.Attendance:
        """
        Records a student's status for a (date, session). Marking the same
        (student, date, session) again overwrites the earlier record.
        """
        student = await self.db.get(db_models.Students, data.student_id)
        if student is None or not student.is_active:
            raise NotFoundError("Student not found")

        stmt = select(db_models.Attendance).filter(
            db_models.Attendance.student_id == data.student_id,
            db_models.Attendance.date == data.date,
            db_models.Attendance.session == data.session.value,
        )
        record = (await self.db.execute(stmt)).scalars().first()

        async with savepoint(self.db, "Attendance already recorded for this session"):
            if record is None:
                record = db_models.Attendance(
                    student_id=data.student_id,
                    date=data.date,
                    session=data.session.value,
                    status=data.status.value,
                    class_id=student.class_id,
                    remarks=data.remarks,
                    marked_by=data.marked_by,
                )
                self.db.add(record)
            else:
                record.status = data.status.value
                record.remarks = data.remarks
                record.marked_by = data.marked_by

        log.info(f"Attendance marked for student {data.student_id} on {data.date} ({data.session.value}): {data.status.value}")
        return record

    async def bulk_mark_attendance(self, records: list[dict], marked_by: Optional[UUID] = None) -> BulkResult:
        outcome = BulkResult()
        for raw in records:
            try:
                payload = {**raw}
                if marked_by is not None:
                    payload['marked_by'] = marked_by
                data = attendance_models.AttendanceMark.model_validate(payload)
                record = await self.mark_attendance(data)
                outcome.success.append(attendance_models.AttendanceRead.model_validate(record).model_dump(mode='json'))
            except ValidationError as e:
                outcome.failed.append(BulkFailure(data=raw, error=str(e)))
            except HTTPException as http_exc:
                outcome.failed.append(BulkFailure(data=raw, error=str(http_exc.detail)))

        log.info(f"Bulk attendance: {len(outcome.success)} success, {len(outcome.failed)} failed")
        return outcome

    async def get_class_attendance(self, class_id: UUID, on: date) -> list[db_models.Attendance]:
        stmt = select(db_models.Attendance).filter(
            db_models.Attendance.class_id == class_id,
            db_models.Attendance.date == on,
        ).order_by(db_models.Attendance.session)
        return list((await self.db.execute(stmt)).scalars().all())

    async def get_student_attendance(
        self, student_id: UUID, start: Optional[date] = None, end: Optional[date] = None
    ) -> list[db_models.Attendance]:
        stmt = select(db_models.Attendance).filter(db_models.Attendance.student_id == student_id)
        if start is not None:
            stmt = stmt.filter(db_models.Attendance.date >= start)
        if end is not None:
            stmt = stmt.filter(db_models.Attendance.date <= end)
        stmt = stmt.order_by(db_models.Attendance.date.desc())
        return list((await self.db.execute(stmt)).scalars().all())

    async def get_attendance_summary(
        self, student_id: UUID, start: Optional[date] = None, end: Optional[date] = None
    ) -> attendance_models.AttendanceSummary:
        if start and end and end < start:
            raise InputValidationError("End date must not be before start date")

        stmt = select(db_models.Attendance.status, func.count()).filter(
            db_models.Attendance.student_id == student_id
        ).group_by(db_models.Attendance.status)
        if start is not None:
            stmt = stmt.filter(db_models.Attendance.date >= start)
        if end is not None:
            stmt = stmt.filter(db_models.Attendance.date <= end)

        counts = {status: count for status, count in (await self.db.execute(stmt)).all()}
        total = sum(counts.values())
        present = counts.get(AttendanceStatus.PRESENT.value, 0)
        late = counts.get(AttendanceStatus.LATE.value, 0)
        return attendance_models.AttendanceSummary(
            student_id=student_id,
            total_days=total,
            present=present,
            absent=counts.get(AttendanceStatus.ABSENT.value, 0),
            late=late,
            excused=counts.get(AttendanceStatus.EXCUSED.value, 0),
            attendance_rate=round((present + late) * 100 / total, 2) if total else 0.0,
        )

    async def notify_parents_of_absence(self, on: date) -> int:
        """
        Sends one notification per absent student (to the parent) for the
        given day. Records already notified are skipped.
        Returns the number of notifications attempted.
        """
        stmt = (
            select(db_models.Attendance, db_models.Students)
            .join(db_models.Students, db_models.Students.id == db_models.Attendance.student_id)
            .filter(
                db_models.Attendance.date == on,
                db_models.Attendance.status == AttendanceStatus.ABSENT.value,
                db_models.Attendance.parent_notified.is_(False),
                db_models.Students.parent_id.is_not(None),
            )
        )
        rows = (await self.db.execute(stmt)).all()

        for record, student in rows:
            await self.communication_service.notify_safely(comm_models.NotificationCreate(
                recipient_id=student.parent_id,
                recipient_type=RecipientType.PARENT,
                title="Absence notice",
                message=f"{student.first_name} {student.last_name} was marked absent on {on:%Y-%m-%d}.",
                notification_type=NotificationType.ATTENDANCE,
            ))
            async with savepoint(self.db, "Attendance could not be updated"):
                record.parent_notified = True

        log.info(f"Absence notifications sent for {len(rows)} students on {on}.")
        return len(rows)
