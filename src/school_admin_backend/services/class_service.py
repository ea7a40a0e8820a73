'''

'''
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.exceptions import InputValidationError, NotFoundError
from ..common.logger import log
from ..database import models as db_models
from ..database.engine import get_db_session
from ..database.utils import savepoint
from ..models import academics as academic_models


class ClassService:
    """
    Service for classes (grade + section per academic year) and subjects.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def _get_class_by_id_internal(self, class_id: UUID) -> db_models.Classes:
        klass = await self.db.get(db_models.Classes, class_id)
        if klass is None or not klass.is_active:
            log.warning(f"Tried to fetch non-existing class: {class_id}")
            raise NotFoundError("Class not found")
        return klass

    async def _check_teacher(self, teacher_id: Optional[UUID]) -> None:
        if teacher_id is None:
            return
        teacher = await self.db.get(db_models.Teachers, teacher_id)
        if teacher is None or not teacher.is_active:
            raise NotFoundError("Teacher not found")

    # --- Classes ---

    async def create_class(self, data: academic_models.ClassCreate) -> db_models.Classes:
        await self._check_teacher(data.class_teacher_id)
        klass = db_models.Classes(**data.model_dump())
        async with savepoint(self.db, "Class could not be created"):
            self.db.add(klass)
        log.info(f"Class {data.name} {data.section or ''} ({data.academic_year}) created.")
        return klass

    async def get_class(self, class_id: UUID) -> db_models.Classes:
        return await self._get_class_by_id_internal(class_id)

    async def list_classes(self, academic_year: Optional[str] = None) -> list[db_models.Classes]:
        stmt = select(db_models.Classes).filter(db_models.Classes.is_active.is_(True))
        if academic_year:
            stmt = stmt.filter(db_models.Classes.academic_year == academic_year)
        stmt = stmt.order_by(db_models.Classes.name, db_models.Classes.section)
        return list((await self.db.execute(stmt)).scalars().all())

    async def update_class(self, class_id: UUID, data: academic_models.ClassUpdate) -> db_models.Classes:
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise InputValidationError("No fields to update")
        if update_data.get('name', '') is None:
            raise InputValidationError("name cannot be null")
        klass = await self._get_class_by_id_internal(class_id)
        await self._check_teacher(update_data.get('class_teacher_id'))

        if update_data.get('capacity') is not None:
            enrolled = await self.count_students(class_id)
            if update_data['capacity'] < enrolled:
                raise InputValidationError(f"Capacity cannot be below the {enrolled} enrolled students")

        async with savepoint(self.db, "Class could not be updated"):
            for key, value in update_data.items():
                setattr(klass, key, value)
        return klass

    async def delete_class(self, class_id: UUID) -> None:
        klass = await self._get_class_by_id_internal(class_id)
        async with savepoint(self.db, "Class could not be deleted"):
            klass.is_active = False
        log.info(f"Class {class_id} deactivated.")

    async def count_students(self, class_id: UUID) -> int:
        stmt = select(func.count(db_models.Students.id)).filter(
            db_models.Students.class_id == class_id,
            db_models.Students.is_active.is_(True),
        )
        return (await self.db.execute(stmt)).scalar_one()

    async def list_class_students(self, class_id: UUID) -> list[db_models.Students]:
        await self._get_class_by_id_internal(class_id)
        stmt = select(db_models.Students).filter(
            db_models.Students.class_id == class_id,
            db_models.Students.is_active.is_(True),
        ).order_by(db_models.Students.last_name, db_models.Students.first_name)
        return list((await self.db.execute(stmt)).scalars().all())

    # --- Subjects ---

    async def create_subject(self, data: academic_models.SubjectCreate) -> db_models.Subjects:
        subject = db_models.Subjects(**data.model_dump())
        async with savepoint(self.db, "Subject code already exists"):
            self.db.add(subject)
        log.info(f"Subject {data.code} created.")
        return subject

    async def list_subjects(self) -> list[db_models.Subjects]:
        stmt = select(db_models.Subjects).filter(
            db_models.Subjects.is_active.is_(True)
        ).order_by(db_models.Subjects.code)
        return list((await self.db.execute(stmt)).scalars().all())

    async def delete_subject(self, subject_id: UUID) -> None:
        subject = await self.db.get(db_models.Subjects, subject_id)
        if subject is None or not subject.is_active:
            raise NotFoundError("Subject not found")
        async with savepoint(self.db, "Subject could not be deleted"):
            subject.is_active = False
        log.info(f"Subject {subject_id} deactivated.")
