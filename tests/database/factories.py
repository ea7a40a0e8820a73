import factory
import uuid
import datetime
from decimal import Decimal
from factory.alchemy import SQLAlchemyModelFactory
from factory.faker import Faker

from school_admin_backend.database import models as db_models
from school_admin_backend.database.db_enums import (
    DayOfWeek, StudentStatus, FeeFrequency, DiscountType, InvoiceStatus
)

# Set by the conftest `factories` fixture to the test's AsyncSession.
# Factories only `add` objects; tests flush through the async session.
test_db_session = None

class BaseFactory(SQLAlchemyModelFactory):
    class Meta:
        abstract = True
        sqlalchemy_session_persistence = None

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        if test_db_session is None:
            raise RuntimeError(
                "The 'test_db_session' global must be set before using factories."
            )
        cls._meta.sqlalchemy_session = test_db_session
        return super()._create(model_class, *args, **kwargs)


class TeacherFactory(BaseFactory):
    id = factory.LazyFunction(uuid.uuid4)
    employee_id = factory.Sequence(lambda n: f"TCH99{n:04d}")
    first_name = Faker("first_name")
    last_name = Faker("last_name")
    email = Faker("email")
    is_active = True

    class Meta:
        model = db_models.Teachers

class ParentFactory(BaseFactory):
    id = factory.LazyFunction(uuid.uuid4)
    first_name = Faker("first_name")
    last_name = Faker("last_name")
    email = Faker("email")
    phone = Faker("phone_number")
    is_active = True

    class Meta:
        model = db_models.Parents

class ClassFactory(BaseFactory):
    id = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"Grade {n % 12 + 1}")
    section = "A"
    academic_year = "2025"
    capacity = 40
    is_active = True

    class Meta:
        model = db_models.Classes

class SubjectFactory(BaseFactory):
    id = factory.LazyFunction(uuid.uuid4)
    name = Faker("word")
    code = factory.Sequence(lambda n: f"SUB{n:03d}")
    is_active = True

    class Meta:
        model = db_models.Subjects

class StudentFactory(BaseFactory):
    id = factory.LazyFunction(uuid.uuid4)
    admission_number = factory.Sequence(lambda n: f"STD1999{n:04d}")
    first_name = Faker("first_name")
    last_name = Faker("last_name")
    status = StudentStatus.ACTIVE.value
    is_active = True
    class_id = None
    parent_id = None

    class Meta:
        model = db_models.Students

class PeriodFactory(BaseFactory):
    id = factory.LazyFunction(uuid.uuid4)
    period_number = factory.Sequence(lambda n: n + 1)
    name = factory.LazyAttribute(lambda o: f"Period {o.period_number}")
    start_time = datetime.time(8, 0)
    end_time = datetime.time(8, 40)
    is_break = False
    is_active = True

    class Meta:
        model = db_models.Periods

class RoomFactory(BaseFactory):
    id = factory.LazyFunction(uuid.uuid4)
    room_number = factory.Sequence(lambda n: f"R{n:03d}")
    capacity = 40
    is_active = True

    class Meta:
        model = db_models.Rooms

class TimetableEntryFactory(BaseFactory):
    id = factory.LazyFunction(uuid.uuid4)
    class_id = factory.LazyFunction(uuid.uuid4)
    subject_id = factory.LazyFunction(uuid.uuid4)
    teacher_id = factory.LazyFunction(uuid.uuid4)
    period_id = factory.LazyFunction(uuid.uuid4)
    room_id = None
    day_of_week = DayOfWeek.MONDAY.value
    academic_year = "2025"
    is_active = True

    class Meta:
        model = db_models.TimetableEntries

class FeeStructureFactory(BaseFactory):
    id = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"Fee {n}")
    amount = Decimal("1000.00")
    frequency = FeeFrequency.MONTHLY.value
    academic_year = "2025"
    class_id = None
    due_day = 10
    late_fee_amount = Decimal("0.00")
    is_mandatory = True
    is_active = True

    class Meta:
        model = db_models.FeeStructures

class DiscountFactory(BaseFactory):
    id = factory.LazyFunction(uuid.uuid4)
    name = "Sibling discount"
    discount_type = DiscountType.PERCENTAGE.value
    value = Decimal("5.00")
    is_active = True

    class Meta:
        model = db_models.FeeDiscounts

class StudentDiscountFactory(BaseFactory):
    id = factory.LazyFunction(uuid.uuid4)
    student_id = factory.LazyFunction(uuid.uuid4)
    discount_id = factory.LazyFunction(uuid.uuid4)
    valid_from = None
    valid_until = None
    is_active = True

    class Meta:
        model = db_models.StudentFeeDiscounts

class InvoiceFactory(BaseFactory):
    id = factory.LazyFunction(uuid.uuid4)
    invoice_number = factory.Sequence(lambda n: f"INV9901{n:04d}")
    student_id = factory.LazyFunction(uuid.uuid4)
    month = "2025-03"
    due_date = datetime.date(2025, 3, 10)
    total_amount = Decimal("1000.00")
    discount_amount = Decimal("0.00")
    late_fee_amount = Decimal("0.00")
    tax_amount = Decimal("0.00")
    net_amount = Decimal("1000.00")
    paid_amount = Decimal("0.00")
    balance_amount = Decimal("1000.00")
    status = InvoiceStatus.PENDING.value

    class Meta:
        model = db_models.FeeInvoices
