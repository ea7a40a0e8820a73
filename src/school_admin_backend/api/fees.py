'''
API endpoints for fee structures, discounts, invoices, payments and fee reports.
'''
from decimal import Decimal
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from ..database.db_enums import InvoiceStatus
from ..models import finance as finance_models
from ..models.common import BulkResult
from ..services.fee_service import FeeService


class FeesAPI:
    """
    A class to encapsulate endpoints for fees.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/fees",
            tags=["Fees"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/structures",
                self.list_fee_structures,
                methods=["GET"],
                response_model=list[finance_models.FeeStructureRead])
        self.router.add_api_route(
                "/structures",
                self.create_fee_structure,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=finance_models.FeeStructureRead)
        self.router.add_api_route(
                "/structures/{structure_id}",
                self.get_fee_structure,
                methods=["GET"],
                response_model=finance_models.FeeStructureRead)
        self.router.add_api_route(
                "/structures/{structure_id}",
                self.update_fee_structure,
                methods=["PATCH"],
                response_model=finance_models.FeeStructureRead)
        self.router.add_api_route(
                "/discounts",
                self.create_discount,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=finance_models.DiscountRead)
        self.router.add_api_route(
                "/discounts/students",
                self.apply_discount_to_student,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=finance_models.StudentDiscountRead)
        self.router.add_api_route(
                "/invoices",
                self.list_invoices,
                methods=["GET"],
                response_model=list[finance_models.InvoiceRead])
        self.router.add_api_route(
                "/invoices/generate",
                self.generate_invoice,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=finance_models.InvoiceDetailRead)
        self.router.add_api_route(
                "/invoices/bulk",
                self.generate_bulk_invoices,
                methods=["POST"],
                response_model=BulkResult)
        self.router.add_api_route(
                "/invoices/{invoice_id}",
                self.get_invoice,
                methods=["GET"],
                response_model=finance_models.InvoiceDetailRead)
        self.router.add_api_route(
                "/payments",
                self.list_payments,
                methods=["GET"],
                response_model=list[finance_models.PaymentRead])
        self.router.add_api_route(
                "/payments",
                self.record_payment,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=finance_models.PaymentRead)
        self.router.add_api_route(
                "/payments/mobile/callback",
                self.mobile_payment_callback,
                methods=["POST"],
                response_model=finance_models.MobilePaymentResult)
        self.router.add_api_route(
                "/defaulters",
                self.get_defaulters,
                methods=["GET"],
                response_model=list[finance_models.DefaulterRead])
        self.router.add_api_route(
                "/statistics",
                self.get_fee_statistics,
                methods=["GET"],
                response_model=finance_models.FeeStatistics)
        self.router.add_api_route(
                "/students/{student_id}/account",
                self.get_student_fee_account,
                methods=["GET"],
                response_model=finance_models.StudentFeeAccount)

    # --- Structures & Discounts ---

    async def list_fee_structures(
        self,
        fee_service: Annotated[FeeService, Depends(FeeService)],
        class_id: Annotated[UUID | None, Query(description="Class fees plus school-wide fees")] = None,
        academic_year: Annotated[str | None, Query()] = None,
    ) -> list[Any]:
        return await fee_service.list_fee_structures(class_id, academic_year)

    async def create_fee_structure(
        self,
        structure_data: finance_models.FeeStructureCreate,
        fee_service: Annotated[FeeService, Depends(FeeService)]
    ) -> Any:
        return await fee_service.create_fee_structure(structure_data)

    async def get_fee_structure(
        self,
        structure_id: UUID,
        fee_service: Annotated[FeeService, Depends(FeeService)]
    ) -> Any:
        return await fee_service.get_fee_structure(structure_id)

    async def update_fee_structure(
        self,
        structure_id: UUID,
        update_data: finance_models.FeeStructureUpdate,
        fee_service: Annotated[FeeService, Depends(FeeService)]
    ) -> Any:
        return await fee_service.update_fee_structure(structure_id, update_data)

    async def create_discount(
        self,
        discount_data: finance_models.DiscountCreate,
        fee_service: Annotated[FeeService, Depends(FeeService)]
    ) -> Any:
        return await fee_service.create_discount(discount_data)

    async def apply_discount_to_student(
        self,
        link_data: finance_models.StudentDiscountCreate,
        fee_service: Annotated[FeeService, Depends(FeeService)]
    ) -> Any:
        return await fee_service.apply_discount_to_student(link_data)

    # --- Invoices ---

    async def list_invoices(
        self,
        fee_service: Annotated[FeeService, Depends(FeeService)],
        student_id: Annotated[UUID | None, Query()] = None,
        invoice_status: Annotated[InvoiceStatus | None, Query(alias="status")] = None,
        month: Annotated[str | None, Query(pattern=finance_models.MONTH_PATTERN)] = None,
    ) -> list[Any]:
        return await fee_service.list_invoices(
            student_id=student_id,
            status=invoice_status.value if invoice_status else None,
            month=month,
        )

    async def generate_invoice(
        self,
        invoice_data: finance_models.InvoiceGenerate,
        fee_service: Annotated[FeeService, Depends(FeeService)]
    ) -> Any:
        """
        Generates the monthly invoice of one student.
        """
        return await fee_service.generate_invoice(invoice_data.student_id, invoice_data.month)

    async def generate_bulk_invoices(
        self,
        bulk_data: finance_models.BulkInvoiceGenerate,
        fee_service: Annotated[FeeService, Depends(FeeService)]
    ) -> Any:
        return await fee_service.generate_bulk_invoices(bulk_data.month, bulk_data.class_id)

    async def get_invoice(
        self,
        invoice_id: UUID,
        fee_service: Annotated[FeeService, Depends(FeeService)]
    ) -> Any:
        return await fee_service.get_invoice(invoice_id)

    # --- Payments ---

    async def list_payments(
        self,
        fee_service: Annotated[FeeService, Depends(FeeService)],
        invoice_id: Annotated[UUID | None, Query()] = None,
        student_id: Annotated[UUID | None, Query()] = None,
    ) -> list[Any]:
        return await fee_service.list_payments(invoice_id, student_id)

    async def record_payment(
        self,
        payment_data: finance_models.PaymentCreate,
        fee_service: Annotated[FeeService, Depends(FeeService)]
    ) -> Any:
        """
        Records a payment against an invoice. Amounts above the outstanding
        balance are rejected.
        """
        return await fee_service.record_payment(payment_data)

    async def mobile_payment_callback(
        self,
        callback: finance_models.MobilePaymentCallback,
        fee_service: Annotated[FeeService, Depends(FeeService)]
    ) -> Any:
        return await fee_service.record_mobile_payment(callback)

    # --- Reports ---

    async def get_defaulters(
        self,
        fee_service: Annotated[FeeService, Depends(FeeService)],
        class_id: Annotated[UUID | None, Query()] = None,
        threshold: Annotated[Decimal, Query(ge=0)] = Decimal('0'),
    ) -> list[Any]:
        return await fee_service.get_defaulters(class_id, threshold)

    async def get_fee_statistics(
        self,
        fee_service: Annotated[FeeService, Depends(FeeService)],
        class_id: Annotated[UUID | None, Query()] = None,
        month: Annotated[str | None, Query(pattern=finance_models.MONTH_PATTERN)] = None,
    ) -> Any:
        return await fee_service.get_fee_statistics(class_id, month)

    async def get_student_fee_account(
        self,
        student_id: UUID,
        fee_service: Annotated[FeeService, Depends(FeeService)]
    ) -> Any:
        return await fee_service.get_student_fee_account(student_id)


# Instantiate the class and export its router
fees_api = FeesAPI()
router = fees_api.router
