'''
Fee structures, discounts, monthly invoices and payments.

Invoice amounts follow:
    net_amount     = total_amount - discount_amount + late_fee_amount + tax_amount
    balance_amount = net_amount - paid_amount

Both are maintained on every write. Payments larger than the outstanding
balance are refused on every entry point, so balance_amount never goes
negative.
'''
import calendar
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any, Optional
from uuid import UUID, uuid4

from fastapi import Depends, HTTPException
from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..common.config import settings
from ..common.exceptions import ConflictError, InputValidationError, NotFoundError
from ..common.logger import log
from ..database import models as db_models
from ..database.db_enums import (
    DiscountType,
    InvoiceStatus,
    NotificationType,
    PaymentMethod,
    PaymentStatus,
    RecipientType,
)
from ..database.engine import get_db_session
from ..database.utils import savepoint
from ..models import communications as comm_models
from ..models import finance as finance_models
from ..models.common import BulkFailure, BulkResult
from .communication_service import CommunicationService
from .sequence_service import SequenceService

CENT = Decimal('0.01')
OUTSTANDING_STATUSES = (
    InvoiceStatus.PENDING.value,
    InvoiceStatus.PARTIAL.value,
    InvoiceStatus.OVERDUE.value,
)


def to_money(value: Any) -> Decimal:
    """Normalizes a number to a two-decimal Decimal."""
    if value is None:
        return Decimal('0.00')
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def month_bounds(month: str) -> tuple[date, date]:
    """Returns the first and last day of a 'YYYY-MM' month."""
    try:
        year_part, month_part = month.split('-')
        year, month_number = int(year_part), int(month_part)
        first = date(year, month_number, 1)
    except ValueError:
        raise InputValidationError("Month must be in YYYY-MM format") from None
    if len(year_part) != 4 or len(month_part) != 2:
        raise InputValidationError("Month must be in YYYY-MM format")
    last = date(year, month_number, calendar.monthrange(year, month_number)[1])
    return first, last


def due_date_for(first_day: date, due_day: int) -> date:
    """The month's due date, clamped to its last day."""
    last_day = calendar.monthrange(first_day.year, first_day.month)[1]
    return first_day.replace(day=min(due_day, last_day))


def compute_discount(total: Decimal, discounts: list[db_models.FeeDiscounts]) -> Decimal:
    """
    Sums every discount against the pre-discount total. Percentages are
    taken of the total, fixed amounts are taken as is. The sum is capped
    at the total.
    """
    discount_total = Decimal('0.00')
    for discount in discounts:
        if discount.discount_type == DiscountType.PERCENTAGE.value:
            discount_total += to_money(total * to_money(discount.value) / Decimal('100'))
        else:
            discount_total += to_money(discount.value)
    return min(discount_total, total)


class FeeService:
    """
    Service for all business logic related to fees, invoices and payments.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        sequence_service: Annotated[SequenceService, Depends(SequenceService)],
        communication_service: Annotated[CommunicationService, Depends(CommunicationService)],
    ):
        self.db = db
        self.sequence_service = sequence_service
        self.communication_service = communication_service

    # --- Internal Fetchers ---

    async def _get_student_internal(self, student_id: UUID) -> db_models.Students:
        student = await self.db.get(db_models.Students, student_id)
        if student is None or not student.is_active:
            log.warning(f"Tried to fetch non-existing student: {student_id}")
            raise NotFoundError("Student not found")
        return student

    async def _get_invoice_internal(self, invoice_id: UUID, for_update: bool = False) -> db_models.FeeInvoices:
        """
        Fetches an invoice with its items. With `for_update`, the row is
        locked until the request's transaction ends.
        """
        stmt = select(db_models.FeeInvoices).options(
            selectinload(db_models.FeeInvoices.items)
        ).filter(db_models.FeeInvoices.id == invoice_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        invoice = result.scalars().first()
        if not invoice:
            log.warning(f"Tried to fetch non-existing invoice: {invoice_id}")
            raise NotFoundError("Invoice not found")
        return invoice

    async def _get_fee_structure_internal(self, structure_id: UUID) -> db_models.FeeStructures:
        structure = await self.db.get(db_models.FeeStructures, structure_id)
        if structure is None:
            raise NotFoundError("Fee structure not found")
        return structure

    # --- Fee Structures ---

    async def create_fee_structure(self, data: finance_models.FeeStructureCreate) -> db_models.FeeStructures:
        log.info(f"Creating fee structure '{data.name}' ({data.amount}) for class {data.class_id}.")
        structure = db_models.FeeStructures(
            name=data.name,
            amount=to_money(data.amount),
            academic_year=data.academic_year,
            class_id=data.class_id,
            frequency=data.frequency.value,
            description=data.description,
            due_day=data.due_day,
            late_fee_amount=to_money(data.late_fee_amount),
            is_mandatory=data.is_mandatory,
        )
        async with savepoint(self.db, "Fee structure could not be created"):
            self.db.add(structure)
        return structure

    async def get_fee_structure(self, structure_id: UUID) -> db_models.FeeStructures:
        return await self._get_fee_structure_internal(structure_id)

    async def list_fee_structures(
        self, class_id: Optional[UUID] = None, academic_year: Optional[str] = None
    ) -> list[db_models.FeeStructures]:
        Fee = db_models.FeeStructures
        stmt = select(Fee).filter(Fee.is_active.is_(True))
        if class_id is not None:
            stmt = stmt.filter(or_(Fee.class_id == class_id, Fee.class_id.is_(None)))
        if academic_year is not None:
            stmt = stmt.filter(Fee.academic_year == academic_year)
        result = await self.db.execute(stmt.order_by(Fee.name))
        return list(result.scalars().all())

    async def update_fee_structure(
        self, structure_id: UUID, data: finance_models.FeeStructureUpdate
    ) -> db_models.FeeStructures:
        """
        Partial update. Amount and class are frozen once an invoice item
        points at the structure, because invoices copy their amount from it.
        """
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise InputValidationError("No fields to update")

        structure = await self._get_fee_structure_internal(structure_id)

        changes_billing = (
            ('amount' in update_data and to_money(update_data['amount']) != to_money(structure.amount))
            or ('class_id' in update_data and update_data['class_id'] != structure.class_id)
        )
        if changes_billing:
            stmt = select(db_models.FeeInvoiceItems.id).filter(
                db_models.FeeInvoiceItems.fee_structure_id == structure_id
            ).limit(1)
            if (await self.db.execute(stmt)).first() is not None:
                log.warning(f"Refused to change amount/class of invoiced fee structure {structure_id}.")
                raise ConflictError("Fee structure is already used by invoices; create a new one instead")

        if 'frequency' in update_data and update_data['frequency'] is not None:
            update_data['frequency'] = update_data['frequency'].value
        for money_field in ('amount', 'late_fee_amount'):
            if update_data.get(money_field) is not None:
                update_data[money_field] = to_money(update_data[money_field])

        async with savepoint(self.db, "Fee structure could not be updated"):
            for key, value in update_data.items():
                setattr(structure, key, value)
        log.info(f"Fee structure {structure_id} updated: {list(update_data)}")
        return structure

    # --- Discounts ---

    async def create_discount(self, data: finance_models.DiscountCreate) -> db_models.FeeDiscounts:
        if data.discount_type == DiscountType.PERCENTAGE and data.value > 100:
            raise InputValidationError("Percentage discount cannot exceed 100")
        discount = db_models.FeeDiscounts(
            name=data.name,
            discount_type=data.discount_type.value,
            value=to_money(data.value),
            description=data.description,
        )
        async with savepoint(self.db, "Discount could not be created"):
            self.db.add(discount)
        log.info(f"Discount '{data.name}' created ({data.discount_type.value} {data.value}).")
        return discount

    async def apply_discount_to_student(
        self, data: finance_models.StudentDiscountCreate, applied_by: Optional[UUID] = None
    ) -> db_models.StudentFeeDiscounts:
        await self._get_student_internal(data.student_id)
        discount = await self.db.get(db_models.FeeDiscounts, data.discount_id)
        if discount is None or not discount.is_active:
            raise NotFoundError("Discount not found")
        if data.valid_from and data.valid_until and data.valid_until < data.valid_from:
            raise InputValidationError("valid_until must not be before valid_from")

        link = db_models.StudentFeeDiscounts(
            student_id=data.student_id,
            discount_id=data.discount_id,
            reason=data.reason,
            valid_from=data.valid_from,
            valid_until=data.valid_until,
            applied_by=applied_by,
        )
        async with savepoint(self.db, "Discount could not be applied"):
            self.db.add(link)
        log.info(f"Discount {data.discount_id} applied to student {data.student_id}.")
        return link

    async def _discounts_for_month(self, student_id: UUID, first: date, last: date) -> list[db_models.FeeDiscounts]:
        """Active discounts of the student whose validity overlaps the month."""
        Link = db_models.StudentFeeDiscounts
        Discount = db_models.FeeDiscounts
        stmt = (
            select(Discount)
            .join(Link, Link.discount_id == Discount.id)
            .filter(
                Link.student_id == student_id,
                Link.is_active.is_(True),
                Discount.is_active.is_(True),
                or_(Link.valid_from.is_(None), Link.valid_from <= last),
                or_(Link.valid_until.is_(None), Link.valid_until >= first),
            )
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # --- Invoices ---

    async def generate_invoice(
        self,
        student_id: UUID,
        month: str,
        created_by: Optional[UUID] = None,
        on: Optional[date] = None,
    ) -> db_models.FeeInvoices:
        """
        Builds the student's invoice for `month` ('YYYY-MM') from every
        active fee structure of their class plus the school-wide ones,
        then applies the discounts valid during that month.
        The invoice and its items are written together or not at all.
        """
        log.info(f"Generating invoice for student {student_id}, month {month}.")
        try:
            first_day, last_day = month_bounds(month)

            # 1. Student must exist
            student = await self._get_student_internal(student_id)

            # 2. One invoice per student per month
            stmt = select(db_models.FeeInvoices.id).filter(
                db_models.FeeInvoices.student_id == student_id,
                db_models.FeeInvoices.month == month,
            ).limit(1)
            if (await self.db.execute(stmt)).first() is not None:
                log.warning(f"Invoice for student {student_id} and month {month} already exists.")
                raise ConflictError("Invoice already exists for this month")

            # 3. Applicable fee structures
            Fee = db_models.FeeStructures
            class_filter = Fee.class_id.is_(None)
            if student.class_id is not None:
                class_filter = or_(Fee.class_id == student.class_id, Fee.class_id.is_(None))
            result = await self.db.execute(
                select(Fee).filter(Fee.is_active.is_(True), class_filter).order_by(Fee.name)
            )
            structures = list(result.scalars().all())

            # 4. Amounts
            total = sum((to_money(fee.amount) for fee in structures), Decimal('0.00'))
            discounts = await self._discounts_for_month(student_id, first_day, last_day)
            discount_amount = compute_discount(total, discounts)
            late_fee = Decimal('0.00')
            tax = Decimal('0.00')
            net = total - discount_amount + late_fee + tax

            # 5. Persist invoice and items atomically
            invoice_number = await self.sequence_service.next_invoice_number(on)
            invoice_id = uuid4()
            invoice = db_models.FeeInvoices(
                id=invoice_id,
                invoice_number=invoice_number,
                student_id=student_id,
                month=month,
                due_date=due_date_for(first_day, settings.INVOICE_DUE_DAY),
                total_amount=total,
                discount_amount=discount_amount,
                late_fee_amount=late_fee,
                tax_amount=tax,
                net_amount=net,
                paid_amount=Decimal('0.00'),
                balance_amount=net,
                status=InvoiceStatus.PAID.value if net <= 0 else InvoiceStatus.PENDING.value,
                created_by=created_by,
                items=[
                    db_models.FeeInvoiceItems(
                        invoice_id=invoice_id,
                        fee_structure_id=fee.id,
                        description=fee.name,
                        amount=to_money(fee.amount),
                    )
                    for fee in structures
                ],
            )
            async with savepoint(self.db, "Invoice could not be created, please retry"):
                self.db.add(invoice)

            log.info(f"Invoice {invoice_number} generated: total={total} discount={discount_amount} net={net}")
            return invoice

        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error generating invoice for student {student_id}, month {month}: {e}", exc_info=True)
            raise

    async def generate_bulk_invoices(
        self,
        month: str,
        class_id: Optional[UUID] = None,
        created_by: Optional[UUID] = None,
    ) -> BulkResult:
        """
        Generates the month's invoice for every active student (of one class,
        or of the whole school). Students that already have one, or fail
        for any other reason, are reported in `failed`.
        """
        month_bounds(month)
        stmt = select(db_models.Students).filter(
            db_models.Students.is_active.is_(True),
            db_models.Students.status == 'active',
        )
        if class_id is not None:
            stmt = stmt.filter(db_models.Students.class_id == class_id)
        students = list((await self.db.execute(stmt.order_by(db_models.Students.admission_number))).scalars().all())
        if not students:
            raise NotFoundError("No active students found")

        outcome = BulkResult()
        for student in students:
            student_id = student.id
            try:
                invoice = await self.generate_invoice(student_id, month, created_by)
                outcome.success.append(finance_models.InvoiceRead.model_validate(invoice).model_dump(mode='json'))
            except HTTPException as http_exc:
                outcome.failed.append(BulkFailure(data={'student_id': str(student_id)}, error=str(http_exc.detail)))

        log.info(f"Bulk invoices for {month}: {len(outcome.success)} created, {len(outcome.failed)} failed.")
        return outcome

    async def get_invoice(self, invoice_id: UUID) -> db_models.FeeInvoices:
        return await self._get_invoice_internal(invoice_id)

    async def list_invoices(
        self,
        student_id: Optional[UUID] = None,
        status: Optional[str] = None,
        month: Optional[str] = None,
    ) -> list[db_models.FeeInvoices]:
        Invoice = db_models.FeeInvoices
        stmt = select(Invoice)
        if student_id is not None:
            stmt = stmt.filter(Invoice.student_id == student_id)
        if status is not None:
            stmt = stmt.filter(Invoice.status == status)
        if month is not None:
            stmt = stmt.filter(Invoice.month == month)
        result = await self.db.execute(stmt.order_by(Invoice.month.desc(), Invoice.invoice_number))
        return list(result.scalars().all())

    # --- Payments ---

    async def _apply_payment(
        self,
        invoice_id: UUID,
        amount: Decimal,
        receipt_number_factory,
        payment_fields: dict,
    ) -> db_models.FeePayments:
        """
        The single routine every payment goes through: validates the
        amount against the invoice, records the payment and moves the
        invoice to partial/paid in one savepoint.
        """
        amount = to_money(amount)

        # 1. Invoice must exist and still be payable
        invoice = await self._get_invoice_internal(invoice_id, for_update=True)
        if invoice.status == InvoiceStatus.PAID.value:
            log.warning(f"Payment attempted on already paid invoice {invoice.invoice_number}.")
            raise ConflictError("Invoice is already paid")
        if invoice.status == InvoiceStatus.CANCELLED.value:
            raise ConflictError("Invoice is cancelled")

        # 2. Amount must be positive and within the balance
        if amount <= 0:
            raise InputValidationError("Payment amount must be greater than zero")
        balance = to_money(invoice.balance_amount)
        if amount > balance:
            log.warning(f"Overpayment refused on {invoice.invoice_number}: {amount} > {balance}")
            raise InputValidationError("Payment amount exceeds outstanding balance")

        # 3. Record payment and update invoice together
        receipt_number = await receipt_number_factory()
        payment = db_models.FeePayments(
            receipt_number=receipt_number,
            invoice_id=invoice.id,
            student_id=invoice.student_id,
            amount=amount,
            status=PaymentStatus.SUCCESS.value,
            **payment_fields,
        )
        new_paid = to_money(invoice.paid_amount) + amount
        new_balance = to_money(invoice.net_amount) - new_paid
        async with savepoint(self.db, "Receipt number already in use, please retry"):
            self.db.add(payment)
            invoice.paid_amount = new_paid
            invoice.balance_amount = new_balance
            invoice.status = InvoiceStatus.PAID.value if new_balance <= 0 else InvoiceStatus.PARTIAL.value

        log.info(f"Payment {receipt_number} of {amount} recorded on {invoice.invoice_number} (status={invoice.status}).")

        # 4. Notify, never failing the payment
        await self.communication_service.notify_safely(comm_models.NotificationCreate(
            recipient_id=invoice.student_id,
            recipient_type=RecipientType.STUDENT,
            title="Payment received",
            message=(
                f"Payment of {settings.CURRENCY} {amount} received for invoice "
                f"{invoice.invoice_number}. Receipt: {receipt_number}. Balance: {new_balance}."
            ),
            notification_type=NotificationType.PAYMENT,
        ))
        return payment

    async def record_payment(
        self, data: finance_models.PaymentCreate, on: Optional[date] = None
    ) -> db_models.FeePayments:
        log.info(f"Recording {data.payment_method.value} payment of {data.amount} on invoice {data.invoice_id}.")
        return await self._apply_payment(
            data.invoice_id,
            data.amount,
            lambda: self.sequence_service.next_receipt_number(on),
            {
                'payment_method': data.payment_method.value,
                'payment_date': data.payment_date or on or date.today(),
                'transaction_id': data.transaction_id,
                'bank_name': data.bank_name,
                'cheque_number': data.cheque_number,
                'collected_by': data.collected_by,
                'remarks': data.remarks,
            },
        )

    async def record_mobile_payment(
        self, callback: finance_models.MobilePaymentCallback, on: Optional[date] = None
    ) -> finance_models.MobilePaymentResult:
        """
        Handles the mobile-money provider's callback. A non-zero result code
        means the payer cancelled or the transfer failed; nothing is stored.
        """
        if callback.result_code != 0:
            log.info(f"Mobile payment for invoice {callback.invoice_id} failed: "
                     f"[{callback.result_code}] {callback.result_desc}")
            return finance_models.MobilePaymentResult(success=False, message=callback.result_desc or "Payment failed")

        if callback.amount is None:
            raise InputValidationError("Callback amount is required for successful payments")

        payment = await self._apply_payment(
            callback.invoice_id,
            callback.amount,
            lambda: self.sequence_service.next_mobile_receipt_number(on),
            {
                'payment_method': PaymentMethod.MPESA.value,
                'payment_date': on or date.today(),
                'transaction_id': callback.mpesa_receipt_number,
                'phone_number': callback.phone_number,
                'remarks': callback.result_desc or None,
            },
        )
        return finance_models.MobilePaymentResult(
            success=True,
            message="Payment recorded",
            payment=finance_models.PaymentRead.model_validate(payment),
        )

    async def list_payments(
        self, invoice_id: Optional[UUID] = None, student_id: Optional[UUID] = None
    ) -> list[db_models.FeePayments]:
        Payment = db_models.FeePayments
        stmt = select(Payment)
        if invoice_id is not None:
            stmt = stmt.filter(Payment.invoice_id == invoice_id)
        if student_id is not None:
            stmt = stmt.filter(Payment.student_id == student_id)
        result = await self.db.execute(stmt.order_by(Payment.receipt_number.desc()))
        return list(result.scalars().all())

    # --- Reports ---

    async def get_defaulters(
        self, class_id: Optional[UUID] = None, threshold: Decimal = Decimal('0')
    ) -> list[finance_models.DefaulterRead]:
        """Students whose outstanding balance is above `threshold`."""
        Invoice = db_models.FeeInvoices
        Student = db_models.Students
        total_due = func.sum(Invoice.balance_amount)
        stmt = (
            select(
                Student.id, Student.admission_number, Student.first_name, Student.last_name,
                Student.class_id, func.count(Invoice.id), total_due,
            )
            .join(Invoice, Invoice.student_id == Student.id)
            .filter(Invoice.status.in_(OUTSTANDING_STATUSES), Invoice.balance_amount > 0)
            .group_by(Student.id, Student.admission_number, Student.first_name, Student.last_name, Student.class_id)
            .having(total_due > threshold)
            .order_by(total_due.desc())
        )
        if class_id is not None:
            stmt = stmt.filter(Student.class_id == class_id)

        rows = (await self.db.execute(stmt)).all()
        return [
            finance_models.DefaulterRead(
                student_id=row[0],
                admission_number=row[1],
                first_name=row[2],
                last_name=row[3],
                class_id=row[4],
                pending_invoices=row[5],
                total_due=to_money(row[6]),
            )
            for row in rows
        ]

    async def get_fee_statistics(
        self, class_id: Optional[UUID] = None, month: Optional[str] = None
    ) -> finance_models.FeeStatistics:
        Invoice = db_models.FeeInvoices
        stmt = select(
            func.count(Invoice.id),
            func.count(Invoice.id).filter(Invoice.status == InvoiceStatus.PAID.value),
            func.count(Invoice.id).filter(Invoice.status == InvoiceStatus.PARTIAL.value),
            func.count(Invoice.id).filter(Invoice.status == InvoiceStatus.PENDING.value),
            func.coalesce(func.sum(Invoice.net_amount), 0),
            func.coalesce(func.sum(Invoice.paid_amount), 0),
            func.coalesce(func.sum(Invoice.balance_amount), 0),
        )
        if class_id is not None:
            stmt = stmt.join(db_models.Students, and_(
                db_models.Students.id == Invoice.student_id,
                db_models.Students.class_id == class_id,
            ))
        if month is not None:
            stmt = stmt.filter(Invoice.month == month)

        row = (await self.db.execute(stmt)).one()
        billed, collected, outstanding = to_money(row[4]), to_money(row[5]), to_money(row[6])
        rate = to_money(collected / billed * 100) if billed > 0 else Decimal('0.00')
        return finance_models.FeeStatistics(
            total_invoices=row[0],
            paid_invoices=row[1],
            partial_invoices=row[2],
            pending_invoices=row[3],
            total_billed=billed,
            total_collected=collected,
            total_outstanding=outstanding,
            collection_rate=rate,
        )

    async def get_student_fee_account(self, student_id: UUID) -> finance_models.StudentFeeAccount:
        await self._get_student_internal(student_id)
        invoices = await self.list_invoices(student_id=student_id)
        payments = await self.list_payments(student_id=student_id)
        return finance_models.StudentFeeAccount(
            student_id=student_id,
            total_billed=sum((to_money(i.net_amount) for i in invoices), Decimal('0.00')),
            total_paid=sum((to_money(i.paid_amount) for i in invoices), Decimal('0.00')),
            total_balance=sum((to_money(i.balance_amount) for i in invoices), Decimal('0.00')),
            invoices=[finance_models.InvoiceRead.model_validate(i) for i in invoices],
            payments=[finance_models.PaymentRead.model_validate(p) for p in payments],
        )
