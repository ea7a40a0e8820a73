'''
Services for the people of the school: parents, students and teachers.
'''
from typing import Annotated, Any, Optional, Type
from uuid import UUID

from fastapi import Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.exceptions import InputValidationError, NotFoundError
from ..common.logger import log
from ..database import models as db_models
from ..database.db_enums import StudentStatus
from ..database.engine import get_db_session
from ..database.utils import savepoint
from ..models import users as user_models
from ..models.common import BulkFailure, BulkResult
from .sequence_service import SequenceService


class UserService:
    """
    Base service with the fetch/update/soft-delete logic shared by all
    person records.
    """
    model: Type[db_models.Base] = None
    label: str = "User"

    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def _get_by_id_internal(self, row_id: UUID):
        """
        Fetches one active row by ID. Raises 404 if missing or soft-deleted.
        """
        row = await self.db.get(self.model, row_id)
        if row is None or not row.is_active:
            log.warning(f"Tried to fetch non-existing {self.label.lower()}: {row_id}")
            raise NotFoundError(f"{self.label} not found")
        return row

    async def _apply_update(self, row_id: UUID, update_data: dict[str, Any]):
        if not update_data:
            raise InputValidationError("No fields to update")
        row = await self._get_by_id_internal(row_id)
        async with savepoint(self.db, f"{self.label} could not be updated"):
            for key, value in update_data.items():
                setattr(row, key, value.value if hasattr(value, 'value') else value)
        log.info(f"{self.label} {row_id} updated: {list(update_data)}")
        return row

    async def _soft_delete(self, row_id: UUID, **extra) -> None:
        row = await self._get_by_id_internal(row_id)
        async with savepoint(self.db, f"{self.label} could not be deleted"):
            row.is_active = False
            for key, value in extra.items():
                setattr(row, key, value)
        log.info(f"{self.label} {row_id} deactivated.")


class ParentService(UserService):
    model = db_models.Parents
    label = "Parent"

    async def create_parent(self, data: user_models.ParentCreate) -> db_models.Parents:
        parent = db_models.Parents(**data.model_dump())
        async with savepoint(self.db, "Parent could not be created"):
            self.db.add(parent)
        log.info(f"Parent {parent.id} ({data.first_name} {data.last_name}) created.")
        return parent

    async def get_parent(self, parent_id: UUID) -> db_models.Parents:
        return await self._get_by_id_internal(parent_id)

    async def list_parents(self) -> list[db_models.Parents]:
        stmt = select(db_models.Parents).filter(
            db_models.Parents.is_active.is_(True)
        ).order_by(db_models.Parents.last_name, db_models.Parents.first_name)
        return list((await self.db.execute(stmt)).scalars().all())

    async def update_parent(self, parent_id: UUID, data: user_models.ParentUpdate) -> db_models.Parents:
        return await self._apply_update(parent_id, data.model_dump(exclude_unset=True))

    async def delete_parent(self, parent_id: UUID) -> None:
        await self._soft_delete(parent_id)

    async def get_children(self, parent_id: UUID) -> list[db_models.Students]:
        await self._get_by_id_internal(parent_id)
        stmt = select(db_models.Students).filter(
            db_models.Students.parent_id == parent_id,
            db_models.Students.is_active.is_(True),
        ).order_by(db_models.Students.admission_number)
        return list((await self.db.execute(stmt)).scalars().all())


class StudentService(UserService):
    model = db_models.Students
    label = "Student"

    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        sequence_service: Annotated[SequenceService, Depends(SequenceService)],
    ):
        super().__init__(db)
        self.sequence_service = sequence_service

    async def _check_references(self, class_id: Optional[UUID], parent_id: Optional[UUID]) -> None:
        if class_id is not None:
            klass = await self.db.get(db_models.Classes, class_id)
            if klass is None or not klass.is_active:
                raise NotFoundError("Class not found")
        if parent_id is not None:
            parent = await self.db.get(db_models.Parents, parent_id)
            if parent is None or not parent.is_active:
                raise NotFoundError("Parent not found")

    async def create_student(self, data: user_models.StudentCreate) -> db_models.Students:
        """
        Admits a new student and assigns the next admission number.
        """
        log.info(f"Admitting student {data.first_name} {data.last_name} into class {data.class_id}.")
        try:
            await self._check_references(data.class_id, data.parent_id)

            admission_number = await self.sequence_service.next_admission_number(data.admission_date)
            student = db_models.Students(
                admission_number=admission_number,
                first_name=data.first_name,
                last_name=data.last_name,
                email=data.email,
                date_of_birth=data.date_of_birth,
                gender=data.gender.value if data.gender else None,
                class_id=data.class_id,
                parent_id=data.parent_id,
                admission_date=data.admission_date,
                status=StudentStatus.ACTIVE.value,
            )
            async with savepoint(self.db, "Admission number already exists"):
                self.db.add(student)

            log.info(f"Student created: {admission_number}")
            return student

        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error creating student {data.first_name} {data.last_name}: {e}", exc_info=True)
            raise

    async def get_student(self, student_id: UUID) -> db_models.Students:
        return await self._get_by_id_internal(student_id)

    async def list_students(self, filters: Optional[user_models.StudentFilters] = None) -> list[db_models.Students]:
        Student = db_models.Students
        stmt = select(Student).filter(Student.is_active.is_(True))
        if filters is not None:
            if filters.class_id:
                stmt = stmt.filter(Student.class_id == filters.class_id)
            if filters.parent_id:
                stmt = stmt.filter(Student.parent_id == filters.parent_id)
            if filters.status:
                stmt = stmt.filter(Student.status == filters.status.value)
            if filters.search:
                pattern = f"%{filters.search}%"
                stmt = stmt.filter(or_(
                    Student.first_name.ilike(pattern),
                    Student.last_name.ilike(pattern),
                    Student.admission_number.ilike(pattern),
                ))
        result = await self.db.execute(stmt.order_by(Student.admission_number))
        return list(result.scalars().all())

    async def update_student(self, student_id: UUID, data: user_models.StudentUpdate) -> db_models.Students:
        update_data = data.model_dump(exclude_unset=True)
        for required in ('first_name', 'last_name', 'status'):
            if required in update_data and update_data[required] is None:
                raise InputValidationError(f"{required} cannot be null")
        await self._check_references(update_data.get('class_id'), update_data.get('parent_id'))
        return await self._apply_update(student_id, update_data)

    async def delete_student(self, student_id: UUID) -> None:
        await self._soft_delete(student_id, status=StudentStatus.INACTIVE.value)

    async def bulk_import_students(self, records: list[dict]) -> BulkResult:
        """
        Creates one student per record. Invalid or failing records are
        reported with their error and do not stop the import.
        """
        log.info(f"Bulk importing {len(records)} students.")
        outcome = BulkResult()
        for record in records:
            try:
                data = user_models.StudentCreate.model_validate(record)
                student = await self.create_student(data)
                outcome.success.append(user_models.StudentRead.model_validate(student).model_dump(mode='json'))
            except ValidationError as e:
                outcome.failed.append(BulkFailure(data=record, error=str(e)))
            except HTTPException as http_exc:
                outcome.failed.append(BulkFailure(data=record, error=str(http_exc.detail)))
        log.info(f"Bulk import finished: {len(outcome.success)} created, {len(outcome.failed)} failed.")
        return outcome


class TeacherService(UserService):
    model = db_models.Teachers
    label = "Teacher"

    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        sequence_service: Annotated[SequenceService, Depends(SequenceService)],
    ):
        super().__init__(db)
        self.sequence_service = sequence_service

    async def create_teacher(self, data: user_models.TeacherCreate) -> db_models.Teachers:
        employee_id = await self.sequence_service.next_employee_id(data.joining_date)
        teacher = db_models.Teachers(employee_id=employee_id, **data.model_dump())
        async with savepoint(self.db, "Employee ID already exists"):
            self.db.add(teacher)
        log.info(f"Teacher created: {employee_id}")
        return teacher

    async def get_teacher(self, teacher_id: UUID) -> db_models.Teachers:
        return await self._get_by_id_internal(teacher_id)

    async def list_teachers(self) -> list[db_models.Teachers]:
        stmt = select(db_models.Teachers).filter(
            db_models.Teachers.is_active.is_(True)
        ).order_by(db_models.Teachers.employee_id)
        return list((await self.db.execute(stmt)).scalars().all())

    async def update_teacher(self, teacher_id: UUID, data: user_models.TeacherUpdate) -> db_models.Teachers:
        return await self._apply_update(teacher_id, data.model_dump(exclude_unset=True))

    async def delete_teacher(self, teacher_id: UUID) -> None:
        await self._soft_delete(teacher_id)
