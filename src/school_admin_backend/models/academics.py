'''

'''
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# --- Classes ---

class ClassCreate(BaseModel):
    name: str = Field(..., min_length=1)
    academic_year: str = Field(..., min_length=4)
    section: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1)
    room_number: Optional[str] = None
    class_teacher_id: Optional[UUID] = None


class ClassUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    section: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1)
    room_number: Optional[str] = None
    class_teacher_id: Optional[UUID] = None


class ClassRead(ClassCreate):
    id: UUID
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


# --- Subjects ---

class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, max_length=20)
    description: Optional[str] = None


class SubjectRead(SubjectCreate):
    id: UUID
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


# --- Exams ---

class ExamCreate(BaseModel):
    name: str = Field(..., min_length=1)
    class_id: UUID
    subject_id: UUID
    exam_date: date
    max_marks: Decimal = Field(..., gt=0)
    academic_year: str = Field(..., min_length=4)
    exam_type: Optional[str] = None


class ExamUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    exam_date: Optional[date] = None
    max_marks: Optional[Decimal] = Field(None, gt=0)
    exam_type: Optional[str] = None


class ExamRead(ExamCreate):
    id: UUID
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


# --- Results ---

class ResultCreate(BaseModel):
    exam_id: UUID
    student_id: UUID
    marks_obtained: Decimal = Field(..., ge=0)
    remarks: Optional[str] = None


class ResultRead(BaseModel):
    id: UUID
    exam_id: UUID
    student_id: UUID
    marks_obtained: Decimal
    grade: Optional[str] = None
    remarks: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
