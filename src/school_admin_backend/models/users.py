'''
Pydantic models for students, parents and teachers.
'''
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..database.db_enums import GenderEnum, StudentStatus


class PersonBase(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: Optional[str] = None


# --- Parents ---

class ParentCreate(PersonBase):
    phone: Optional[str] = None
    occupation: Optional[str] = None


class ParentUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    occupation: Optional[str] = None


class ParentRead(ParentCreate):
    id: UUID
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


# --- Students ---

class StudentCreate(PersonBase):
    """
    'admission_number' is excluded and generated by the service.
    """
    date_of_birth: Optional[date] = None
    gender: Optional[GenderEnum] = None
    class_id: Optional[UUID] = None
    parent_id: Optional[UUID] = None
    admission_date: Optional[date] = None


class StudentUpdate(BaseModel):
    """All fields optional to allow for partial updates (PATCH)."""
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[GenderEnum] = None
    class_id: Optional[UUID] = None
    parent_id: Optional[UUID] = None
    status: Optional[StudentStatus] = None


class StudentRead(PersonBase):
    id: UUID
    admission_number: str
    date_of_birth: Optional[date] = None
    gender: Optional[GenderEnum] = None
    class_id: Optional[UUID] = None
    parent_id: Optional[UUID] = None
    admission_date: Optional[date] = None
    status: StudentStatus
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StudentFilters(BaseModel):
    class_id: Optional[UUID] = None
    parent_id: Optional[UUID] = None
    status: Optional[StudentStatus] = None
    search: Optional[str] = None


# --- Teachers ---

class TeacherCreate(PersonBase):
    phone: Optional[str] = None
    qualification: Optional[str] = None
    specialization: Optional[str] = None
    joining_date: Optional[date] = None


class TeacherUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    qualification: Optional[str] = None
    specialization: Optional[str] = None


class TeacherRead(TeacherCreate):
    id: UUID
    employee_id: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
