'''
Pydantic models for fee structures, discounts, invoices and payments.
'''
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..database.db_enums import DiscountType, FeeFrequency, InvoiceStatus, PaymentMethod, PaymentStatus

MONTH_PATTERN = r'^\d{4}-(0[1-9]|1[0-2])$'


# --- Fee Structures ---

class FeeStructureCreate(BaseModel):
    name: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    academic_year: str = Field(..., min_length=4)
    class_id: Optional[UUID] = None # None means the fee applies to every class
    frequency: FeeFrequency = FeeFrequency.MONTHLY
    description: Optional[str] = None
    due_day: int = Field(10, ge=1, le=28)
    late_fee_amount: Decimal = Field(Decimal('0'), ge=0)
    is_mandatory: bool = True


class FeeStructureUpdate(BaseModel):
    """All fields are optional to allow for partial updates (PATCH)."""
    name: Optional[str] = Field(None, min_length=1)
    amount: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    class_id: Optional[UUID] = None
    frequency: Optional[FeeFrequency] = None
    description: Optional[str] = None
    due_day: Optional[int] = Field(None, ge=1, le=28)
    late_fee_amount: Optional[Decimal] = Field(None, ge=0)
    is_mandatory: Optional[bool] = None
    is_active: Optional[bool] = None


class FeeStructureRead(BaseModel):
    id: UUID
    name: str
    amount: Decimal
    academic_year: str
    class_id: Optional[UUID] = None
    frequency: str
    description: Optional[str] = None
    due_day: int
    late_fee_amount: Decimal
    is_mandatory: bool
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


# --- Discounts ---

class DiscountCreate(BaseModel):
    name: str = Field(..., min_length=1)
    discount_type: DiscountType
    value: Decimal = Field(..., gt=0)
    description: Optional[str] = None


class DiscountRead(BaseModel):
    id: UUID
    name: str
    discount_type: DiscountType
    value: Decimal
    description: Optional[str] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class StudentDiscountCreate(BaseModel):
    student_id: UUID
    discount_id: UUID
    reason: Optional[str] = None
    valid_from: Optional[date] = None
    valid_until: Optional[date] = None


class StudentDiscountRead(StudentDiscountCreate):
    id: UUID
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


# --- Invoices ---

class InvoiceGenerate(BaseModel):
    student_id: UUID
    month: str = Field(..., pattern=MONTH_PATTERN, description="Billing month as YYYY-MM")


class BulkInvoiceGenerate(BaseModel):
    month: str = Field(..., pattern=MONTH_PATTERN)
    class_id: Optional[UUID] = None


class InvoiceItemRead(BaseModel):
    id: UUID
    fee_structure_id: UUID
    description: str
    amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class InvoiceRead(BaseModel):
    id: UUID
    invoice_number: str
    student_id: UUID
    month: str
    due_date: date
    total_amount: Decimal
    discount_amount: Decimal
    late_fee_amount: Decimal
    tax_amount: Decimal
    net_amount: Decimal
    paid_amount: Decimal
    balance_amount: Decimal
    status: InvoiceStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InvoiceDetailRead(InvoiceRead):
    items: list[InvoiceItemRead] = []


# --- Payments ---

class PaymentCreate(BaseModel):
    invoice_id: UUID
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_date: Optional[date] = None
    transaction_id: Optional[str] = None
    bank_name: Optional[str] = None
    cheque_number: Optional[str] = None
    collected_by: Optional[UUID] = None
    remarks: Optional[str] = None


class MobilePaymentCallback(BaseModel):
    """
    Result posted by the mobile-money provider once the payer has
    confirmed (or cancelled) a payment request.
    """
    invoice_id: UUID
    result_code: int
    result_desc: str = ""
    amount: Optional[Decimal] = Field(None, gt=0)
    mpesa_receipt_number: Optional[str] = None
    phone_number: Optional[str] = None


class PaymentRead(BaseModel):
    id: UUID
    receipt_number: str
    invoice_id: UUID
    student_id: UUID
    amount: Decimal
    payment_method: PaymentMethod
    payment_date: date
    status: PaymentStatus
    transaction_id: Optional[str] = None
    remarks: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MobilePaymentResult(BaseModel):
    success: bool
    message: str
    payment: Optional[PaymentRead] = None


# --- Reports ---

class DefaulterRead(BaseModel):
    student_id: UUID
    admission_number: str
    first_name: str
    last_name: str
    class_id: Optional[UUID] = None
    pending_invoices: int
    total_due: Decimal


class FeeStatistics(BaseModel):
    total_invoices: int
    paid_invoices: int
    partial_invoices: int
    pending_invoices: int
    total_billed: Decimal
    total_collected: Decimal
    total_outstanding: Decimal
    collection_rate: Decimal


class StudentFeeAccount(BaseModel):
    student_id: UUID
    total_billed: Decimal
    total_paid: Decimal
    total_balance: Decimal
    invoices: list[InvoiceRead]
    payments: list[PaymentRead]
