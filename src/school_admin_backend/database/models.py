from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, ForeignKeyConstraint, Index, Integer, Numeric, PrimaryKeyConstraint, String, Text, Time, UniqueConstraint, Uuid, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
import datetime
import decimal
import uuid


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Base(DeclarativeBase):
    pass


def active_slot_index(name: str, *columns: str) -> Index:
    """Unique index over the columns, restricted to rows with is_active set."""
    return Index(
        name, *columns,
        unique=True,
        postgresql_where=text('is_active'),
        sqlite_where=text('is_active = 1'),
    )


# --- People & Classes ---

class Teachers(Base):
    __tablename__ = 'teachers'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='teachers_pkey'),
        UniqueConstraint('employee_id', name='teachers_employee_id_key'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[str] = mapped_column(String(20))
    first_name: Mapped[str] = mapped_column(Text)
    last_name: Mapped[str] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)
    phone: Mapped[Optional[str]] = mapped_column(String(30))
    qualification: Mapped[Optional[str]] = mapped_column(Text)
    specialization: Mapped[Optional[str]] = mapped_column(Text)
    joining_date: Mapped[Optional[datetime.date]] = mapped_column(Date)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow)


class Parents(Base):
    __tablename__ = 'parents'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='parents_pkey'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name: Mapped[str] = mapped_column(Text)
    last_name: Mapped[str] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)
    phone: Mapped[Optional[str]] = mapped_column(String(30))
    occupation: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow)

    students: Mapped[list['Students']] = relationship('Students', back_populates='parent')


class Classes(Base):
    __tablename__ = 'classes'
    __table_args__ = (
        ForeignKeyConstraint(['class_teacher_id'], ['teachers.id'], ondelete='SET NULL', name='classes_class_teacher_id_fkey'),
        PrimaryKeyConstraint('id', name='classes_pkey'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text)
    academic_year: Mapped[str] = mapped_column(String(20))
    section: Mapped[Optional[str]] = mapped_column(String(20))
    capacity: Mapped[Optional[int]] = mapped_column(Integer)
    room_number: Mapped[Optional[str]] = mapped_column(String(20))
    class_teacher_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow)

    students: Mapped[list['Students']] = relationship('Students', back_populates='class_')


class Subjects(Base):
    __tablename__ = 'subjects'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='subjects_pkey'),
        UniqueConstraint('code', name='subjects_code_key'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text)
    code: Mapped[str] = mapped_column(String(20))
    description: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)


class Students(Base):
    __tablename__ = 'students'
    __table_args__ = (
        ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='SET NULL', name='students_class_id_fkey'),
        ForeignKeyConstraint(['parent_id'], ['parents.id'], ondelete='SET NULL', name='students_parent_id_fkey'),
        PrimaryKeyConstraint('id', name='students_pkey'),
        UniqueConstraint('admission_number', name='students_admission_number_key'),
        Index('idx_students_class_id', 'class_id'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    admission_number: Mapped[str] = mapped_column(String(20))
    first_name: Mapped[str] = mapped_column(Text)
    last_name: Mapped[str] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)
    date_of_birth: Mapped[Optional[datetime.date]] = mapped_column(Date)
    gender: Mapped[Optional[str]] = mapped_column(String(10))
    class_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    parent_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    admission_date: Mapped[Optional[datetime.date]] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), default='active')
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow)

    class_: Mapped[Optional['Classes']] = relationship('Classes', back_populates='students')
    parent: Mapped[Optional['Parents']] = relationship('Parents', back_populates='students')


# --- Timetable ---

class Periods(Base):
    __tablename__ = 'periods'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='periods_pkey'),
        UniqueConstraint('period_number', name='periods_period_number_key'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text)
    period_number: Mapped[int] = mapped_column(Integer)
    start_time: Mapped[datetime.time] = mapped_column(Time)
    end_time: Mapped[datetime.time] = mapped_column(Time)
    is_break: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class Rooms(Base):
    __tablename__ = 'rooms'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='rooms_pkey'),
        UniqueConstraint('room_number', name='rooms_room_number_key'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    room_number: Mapped[str] = mapped_column(String(20))
    room_name: Mapped[Optional[str]] = mapped_column(Text)
    building: Mapped[Optional[str]] = mapped_column(Text)
    capacity: Mapped[Optional[int]] = mapped_column(Integer)
    room_type: Mapped[Optional[str]] = mapped_column(String(30))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class TimetableEntries(Base):
    __tablename__ = 'timetable_entries'
    __table_args__ = (
        ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='CASCADE', name='timetable_entries_class_id_fkey'),
        ForeignKeyConstraint(['subject_id'], ['subjects.id'], name='timetable_entries_subject_id_fkey'),
        ForeignKeyConstraint(['teacher_id'], ['teachers.id'], name='timetable_entries_teacher_id_fkey'),
        ForeignKeyConstraint(['room_id'], ['rooms.id'], ondelete='SET NULL', name='timetable_entries_room_id_fkey'),
        ForeignKeyConstraint(['period_id'], ['periods.id'], name='timetable_entries_period_id_fkey'),
        PrimaryKeyConstraint('id', name='timetable_entries_pkey'),
        active_slot_index('uq_timetable_class_slot', 'class_id', 'period_id', 'day_of_week', 'academic_year'),
        active_slot_index('uq_timetable_teacher_slot', 'teacher_id', 'period_id', 'day_of_week', 'academic_year'),
        active_slot_index('uq_timetable_room_slot', 'room_id', 'period_id', 'day_of_week', 'academic_year'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    class_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    subject_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    teacher_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    period_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    day_of_week: Mapped[str] = mapped_column(String(10))
    academic_year: Mapped[str] = mapped_column(String(20))
    room_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow)

    period: Mapped['Periods'] = relationship('Periods')


class Substitutions(Base):
    __tablename__ = 'substitutions'
    __table_args__ = (
        ForeignKeyConstraint(['timetable_entry_id'], ['timetable_entries.id'], ondelete='CASCADE', name='substitutions_timetable_entry_id_fkey'),
        ForeignKeyConstraint(['original_teacher_id'], ['teachers.id'], name='substitutions_original_teacher_id_fkey'),
        ForeignKeyConstraint(['substitute_teacher_id'], ['teachers.id'], name='substitutions_substitute_teacher_id_fkey'),
        PrimaryKeyConstraint('id', name='substitutions_pkey'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    timetable_entry_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    original_teacher_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    substitute_teacher_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    date: Mapped[datetime.date] = mapped_column(Date)
    period_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    reason: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), default='pending')
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)


# --- Fees ---

class FeeStructures(Base):
    __tablename__ = 'fee_structures'
    __table_args__ = (
        ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='SET NULL', name='fee_structures_class_id_fkey'),
        PrimaryKeyConstraint('id', name='fee_structures_pkey'),
        CheckConstraint('amount >= 0', name='fee_structures_amount_check'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text)
    amount: Mapped[decimal.Decimal] = mapped_column(Numeric(12, 2))
    frequency: Mapped[str] = mapped_column(String(20), default='monthly')
    academic_year: Mapped[str] = mapped_column(String(20))
    class_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    description: Mapped[Optional[str]] = mapped_column(Text)
    due_day: Mapped[int] = mapped_column(Integer, default=10)
    late_fee_amount: Mapped[decimal.Decimal] = mapped_column(Numeric(12, 2), default=decimal.Decimal('0'))
    is_mandatory: Mapped[bool] = mapped_column(Boolean, default=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow)


class FeeDiscounts(Base):
    __tablename__ = 'fee_discounts'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='fee_discounts_pkey'),
        CheckConstraint("discount_type IN ('percentage', 'fixed')", name='fee_discounts_type_check'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text)
    discount_type: Mapped[str] = mapped_column(String(20))
    value: Mapped[decimal.Decimal] = mapped_column(Numeric(12, 2))
    description: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)


class StudentFeeDiscounts(Base):
    __tablename__ = 'student_fee_discounts'
    __table_args__ = (
        ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE', name='student_fee_discounts_student_id_fkey'),
        ForeignKeyConstraint(['discount_id'], ['fee_discounts.id'], ondelete='CASCADE', name='student_fee_discounts_discount_id_fkey'),
        PrimaryKeyConstraint('id', name='student_fee_discounts_pkey'),
        Index('idx_student_fee_discounts_student_id', 'student_id'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    discount_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    reason: Mapped[Optional[str]] = mapped_column(Text)
    valid_from: Mapped[Optional[datetime.date]] = mapped_column(Date)
    valid_until: Mapped[Optional[datetime.date]] = mapped_column(Date)
    applied_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)

    discount: Mapped['FeeDiscounts'] = relationship('FeeDiscounts')


class FeeInvoices(Base):
    __tablename__ = 'fee_invoices'
    __table_args__ = (
        ForeignKeyConstraint(['student_id'], ['students.id'], name='fee_invoices_student_id_fkey'),
        PrimaryKeyConstraint('id', name='fee_invoices_pkey'),
        UniqueConstraint('invoice_number', name='fee_invoices_invoice_number_key'),
        UniqueConstraint('student_id', 'month', name='fee_invoices_student_id_month_key'),
        CheckConstraint('balance_amount >= 0', name='fee_invoices_balance_amount_check'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    invoice_number: Mapped[str] = mapped_column(String(20))
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    month: Mapped[str] = mapped_column(String(7))
    due_date: Mapped[datetime.date] = mapped_column(Date)
    total_amount: Mapped[decimal.Decimal] = mapped_column(Numeric(12, 2))
    discount_amount: Mapped[decimal.Decimal] = mapped_column(Numeric(12, 2), default=decimal.Decimal('0'))
    late_fee_amount: Mapped[decimal.Decimal] = mapped_column(Numeric(12, 2), default=decimal.Decimal('0'))
    tax_amount: Mapped[decimal.Decimal] = mapped_column(Numeric(12, 2), default=decimal.Decimal('0'))
    net_amount: Mapped[decimal.Decimal] = mapped_column(Numeric(12, 2))
    paid_amount: Mapped[decimal.Decimal] = mapped_column(Numeric(12, 2), default=decimal.Decimal('0'))
    balance_amount: Mapped[decimal.Decimal] = mapped_column(Numeric(12, 2))
    status: Mapped[str] = mapped_column(String(20), default='pending')
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow)

    items: Mapped[list['FeeInvoiceItems']] = relationship('FeeInvoiceItems', back_populates='invoice')
    payments: Mapped[list['FeePayments']] = relationship('FeePayments', back_populates='invoice')


class FeeInvoiceItems(Base):
    __tablename__ = 'fee_invoice_items'
    __table_args__ = (
        ForeignKeyConstraint(['invoice_id'], ['fee_invoices.id'], ondelete='CASCADE', name='fee_invoice_items_invoice_id_fkey'),
        ForeignKeyConstraint(['fee_structure_id'], ['fee_structures.id'], name='fee_invoice_items_fee_structure_id_fkey'),
        PrimaryKeyConstraint('id', name='fee_invoice_items_pkey'),
        Index('idx_fee_invoice_items_invoice_id', 'invoice_id'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    invoice_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    fee_structure_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    description: Mapped[str] = mapped_column(Text)
    amount: Mapped[decimal.Decimal] = mapped_column(Numeric(12, 2))

    invoice: Mapped['FeeInvoices'] = relationship('FeeInvoices', back_populates='items')


class FeePayments(Base):
    __tablename__ = 'fee_payments'
    __table_args__ = (
        ForeignKeyConstraint(['invoice_id'], ['fee_invoices.id'], name='fee_payments_invoice_id_fkey'),
        ForeignKeyConstraint(['student_id'], ['students.id'], name='fee_payments_student_id_fkey'),
        PrimaryKeyConstraint('id', name='fee_payments_pkey'),
        UniqueConstraint('receipt_number', name='fee_payments_receipt_number_key'),
        CheckConstraint('amount > 0', name='fee_payments_amount_check'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    receipt_number: Mapped[str] = mapped_column(String(20))
    invoice_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    amount: Mapped[decimal.Decimal] = mapped_column(Numeric(12, 2))
    payment_method: Mapped[str] = mapped_column(String(20))
    payment_date: Mapped[datetime.date] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), default='success')
    transaction_id: Mapped[Optional[str]] = mapped_column(Text)
    phone_number: Mapped[Optional[str]] = mapped_column(String(30))
    bank_name: Mapped[Optional[str]] = mapped_column(Text)
    cheque_number: Mapped[Optional[str]] = mapped_column(Text)
    collected_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    remarks: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)

    invoice: Mapped['FeeInvoices'] = relationship('FeeInvoices', back_populates='payments')


# --- Attendance & Exams ---

class Attendance(Base):
    __tablename__ = 'attendance'
    __table_args__ = (
        ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE', name='attendance_student_id_fkey'),
        ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='SET NULL', name='attendance_class_id_fkey'),
        PrimaryKeyConstraint('id', name='attendance_pkey'),
        UniqueConstraint('student_id', 'date', 'session', name='attendance_student_date_session_key'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    date: Mapped[datetime.date] = mapped_column(Date)
    session: Mapped[str] = mapped_column(String(20), default='full_day')
    status: Mapped[str] = mapped_column(String(20))
    class_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    remarks: Mapped[Optional[str]] = mapped_column(Text)
    marked_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    parent_notified: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow)


class Exams(Base):
    __tablename__ = 'exams'
    __table_args__ = (
        ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='CASCADE', name='exams_class_id_fkey'),
        ForeignKeyConstraint(['subject_id'], ['subjects.id'], name='exams_subject_id_fkey'),
        PrimaryKeyConstraint('id', name='exams_pkey'),
        CheckConstraint('max_marks > 0', name='exams_max_marks_check'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text)
    class_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    subject_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    exam_date: Mapped[datetime.date] = mapped_column(Date)
    max_marks: Mapped[decimal.Decimal] = mapped_column(Numeric(6, 2))
    academic_year: Mapped[str] = mapped_column(String(20))
    exam_type: Mapped[Optional[str]] = mapped_column(String(30))
    is_results_published: Mapped[bool] = mapped_column(Boolean, default=False)
    published_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)


class ExamResults(Base):
    __tablename__ = 'exam_results'
    __table_args__ = (
        ForeignKeyConstraint(['exam_id'], ['exams.id'], ondelete='CASCADE', name='exam_results_exam_id_fkey'),
        ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE', name='exam_results_student_id_fkey'),
        PrimaryKeyConstraint('id', name='exam_results_pkey'),
        UniqueConstraint('exam_id', 'student_id', name='exam_results_exam_id_student_id_key'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    exam_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    marks_obtained: Mapped[decimal.Decimal] = mapped_column(Numeric(6, 2))
    grade: Mapped[Optional[str]] = mapped_column(String(5))
    remarks: Mapped[Optional[str]] = mapped_column(Text)
    entered_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow)


# --- Communications ---

class Notifications(Base):
    __tablename__ = 'notifications'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='notifications_pkey'),
        Index('idx_notifications_recipient_id', 'recipient_id'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    recipient_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    recipient_type: Mapped[str] = mapped_column(String(20))
    title: Mapped[str] = mapped_column(Text)
    message: Mapped[str] = mapped_column(Text)
    notification_type: Mapped[str] = mapped_column(String(20), default='info')
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    read_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True))
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)


class Announcements(Base):
    __tablename__ = 'announcements'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='announcements_pkey'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(Text)
    body: Mapped[str] = mapped_column(Text)
    audience: Mapped[str] = mapped_column(String(20), default='all')
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    publish_date: Mapped[Optional[datetime.date]] = mapped_column(Date)
    expiry_date: Mapped[Optional[datetime.date]] = mapped_column(Date)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
