'''
Exams and exam results.
'''
from decimal import Decimal
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.exceptions import ConflictError, InputValidationError, NotFoundError
from ..common.logger import log
from ..database import models as db_models
from ..database.engine import get_db_session
from ..database.utils import savepoint
from ..models import academics as academic_models
from ..models.common import BulkFailure, BulkResult

# Lower bound (percentage) for each grade, best first.
GRADE_BOUNDARIES = (
    (Decimal('80'), 'A'),
    (Decimal('70'), 'B'),
    (Decimal('60'), 'C'),
    (Decimal('50'), 'D'),
    (Decimal('40'), 'E'),
)


def grade_for(marks: Decimal, max_marks: Decimal) -> str:
    percentage = Decimal(marks) * 100 / Decimal(max_marks)
    for lower_bound, grade in GRADE_BOUNDARIES:
        if percentage >= lower_bound:
            return grade
    return 'F'


class ExamService:
    """
    Service for scheduling exams and recording their results.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def _get_exam_by_id_internal(self, exam_id: UUID) -> db_models.Exams:
        exam = await self.db.get(db_models.Exams, exam_id)
        if exam is None or not exam.is_active:
            log.warning(f"Tried to fetch non-existing exam: {exam_id}")
            raise NotFoundError("Exam not found")
        return exam

    # --- Exams ---

    async def create_exam(self, data: academic_models.ExamCreate) -> db_models.Exams:
        klass = await self.db.get(db_models.Classes, data.class_id)
        if klass is None or not klass.is_active:
            raise NotFoundError("Class not found")
        subject = await self.db.get(db_models.Subjects, data.subject_id)
        if subject is None or not subject.is_active:
            raise NotFoundError("Subject not found")

        exam = db_models.Exams(**data.model_dump())
        async with savepoint(self.db, "Exam could not be created"):
            self.db.add(exam)
        log.info(f"Exam created: {data.name}")
        return exam

    async def get_exam(self, exam_id: UUID) -> db_models.Exams:
        return await self._get_exam_by_id_internal(exam_id)

    async def list_exams(
        self, class_id: Optional[UUID] = None, academic_year: Optional[str] = None
    ) -> list[db_models.Exams]:
        stmt = select(db_models.Exams).filter(db_models.Exams.is_active.is_(True))
        if class_id is not None:
            stmt = stmt.filter(db_models.Exams.class_id == class_id)
        if academic_year is not None:
            stmt = stmt.filter(db_models.Exams.academic_year == academic_year)
        stmt = stmt.order_by(db_models.Exams.exam_date.desc())
        return list((await self.db.execute(stmt)).scalars().all())

    async def update_exam(self, exam_id: UUID, data: academic_models.ExamUpdate) -> db_models.Exams:
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise InputValidationError("No fields to update")
        for required in ('name', 'exam_date', 'max_marks'):
            if required in update_data and update_data[required] is None:
                raise InputValidationError(f"{required} cannot be null")
        exam = await self._get_exam_by_id_internal(exam_id)
        async with savepoint(self.db, "Exam could not be updated"):
            for key, value in update_data.items():
                setattr(exam, key, value)
        return exam

    async def delete_exam(self, exam_id: UUID) -> None:
        exam = await self._get_exam_by_id_internal(exam_id)
        async with savepoint(self.db, "Exam could not be deleted"):
            exam.is_active = False
        log.info(f"Exam {exam_id} deactivated.")

    async def set_results_published(self, exam_id: UUID, published: bool) -> db_models.Exams:
        exam = await self._get_exam_by_id_internal(exam_id)
        async with savepoint(self.db, "Exam could not be updated"):
            exam.is_results_published = published
            exam.published_at = db_models.utcnow() if published else None
        log.info(f"Results for exam {exam_id} {'published' if published else 'unpublished'}.")
        return exam

    # --- Results ---

    async def record_result(
        self, data: academic_models.ResultCreate, entered_by: Optional[UUID] = None
    ) -> db_models.ExamResults:
        """
        Enters (or re-enters) a student's marks. The grade is derived from
        the percentage of the exam's maximum marks.
        """
        exam = await self._get_exam_by_id_internal(data.exam_id)
        if exam.is_results_published:
            raise ConflictError("Results are already published for this exam")
        student = await self.db.get(db_models.Students, data.student_id)
        if student is None or not student.is_active:
            raise NotFoundError("Student not found")
        if data.marks_obtained > exam.max_marks:
            raise InputValidationError(f"Marks cannot exceed the maximum of {exam.max_marks}")

        stmt = select(db_models.ExamResults).filter(
            db_models.ExamResults.exam_id == data.exam_id,
            db_models.ExamResults.student_id == data.student_id,
        )
        result = (await self.db.execute(stmt)).scalars().first()
        grade = grade_for(data.marks_obtained, exam.max_marks)

        async with savepoint(self.db, "Result already recorded for this student"):
            if result is None:
                result = db_models.ExamResults(
                    exam_id=data.exam_id,
                    student_id=data.student_id,
                    marks_obtained=data.marks_obtained,
                    grade=grade,
                    remarks=data.remarks,
                    entered_by=entered_by,
                )
                self.db.add(result)
            else:
                result.marks_obtained = data.marks_obtained
                result.grade = grade
                result.remarks = data.remarks
                result.entered_by = entered_by

        log.info(f"Result entered for student {data.student_id} in exam {data.exam_id}: {grade}")
        return result

    async def bulk_record_results(
        self, exam_id: UUID, records: list[dict], entered_by: Optional[UUID] = None
    ) -> BulkResult:
        outcome = BulkResult()
        for raw in records:
            try:
                data = academic_models.ResultCreate.model_validate({**raw, 'exam_id': exam_id})
                result = await self.record_result(data, entered_by)
                outcome.success.append(academic_models.ResultRead.model_validate(result).model_dump(mode='json'))
            except ValidationError as e:
                outcome.failed.append(BulkFailure(data=raw, error=str(e)))
            except HTTPException as http_exc:
                outcome.failed.append(BulkFailure(data=raw, error=str(http_exc.detail)))

        log.info(f"Bulk results entered: {len(outcome.success)} success, {len(outcome.failed)} failed")
        return outcome

    async def list_results(self, exam_id: UUID) -> list[db_models.ExamResults]:
        await self._get_exam_by_id_internal(exam_id)
        stmt = select(db_models.ExamResults).filter(
            db_models.ExamResults.exam_id == exam_id
        ).order_by(db_models.ExamResults.marks_obtained.desc())
        return list((await self.db.execute(stmt)).scalars().all())
