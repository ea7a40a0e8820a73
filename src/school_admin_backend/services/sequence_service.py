'''
Generates the human-readable codes used across the system:

    STD<yyyy><seq4>    admission numbers
    TCH<yy><seq4>      employee ids
    INV<yy><mm><seq4>  invoice numbers
    REC<yy><seq6>      receipt numbers
    MREC<yy><seq6>     mobile-money receipt numbers

Each code is the greatest existing code with the same prefix plus one.
Uniqueness is guaranteed by the unique constraint on the target column,
not by this service: two concurrent callers may compute the same code,
in which case the second insert fails and surfaces as a ConflictError.
'''
from datetime import date
from typing import Annotated, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from ..common.exceptions import ConflictError
from ..common.logger import log
from ..database import models as db_models
from ..database.engine import get_db_session


def format_code(prefix: str, last_code: Optional[str], width: int) -> str:
    """Returns the code following `last_code` (or the first one) for `prefix`."""
    sequence = 1
    if last_code:
        sequence = int(last_code[-width:]) + 1
    if sequence >= 10 ** width:
        log.error(f"Sequence for prefix {prefix} is exhausted at {last_code}")
        raise ConflictError(f"No more codes available for prefix {prefix}")
    return f"{prefix}{sequence:0{width}d}"


class SequenceService:
    """
    Service for generating sequential identifiers.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def next_code(self, column: InstrumentedAttribute, prefix: str, width: int) -> str:
        stmt = (
            select(column)
            .where(column.like(f"{prefix}%"))
            .order_by(column.desc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        last_code = result.scalar_one_or_none()
        return format_code(prefix, last_code, width)

    async def next_admission_number(self, on: Optional[date] = None) -> str:
        on = on or date.today()
        return await self.next_code(db_models.Students.admission_number, f"STD{on.year}", 4)

    async def next_employee_id(self, on: Optional[date] = None) -> str:
        on = on or date.today()
        return await self.next_code(db_models.Teachers.employee_id, f"TCH{on:%y}", 4)

    async def next_invoice_number(self, on: Optional[date] = None) -> str:
        on = on or date.today()
        return await self.next_code(db_models.FeeInvoices.invoice_number, f"INV{on:%y%m}", 4)

    async def next_receipt_number(self, on: Optional[date] = None) -> str:
        on = on or date.today()
        return await self.next_code(db_models.FeePayments.receipt_number, f"REC{on:%y}", 6)

    async def next_mobile_receipt_number(self, on: Optional[date] = None) -> str:
        on = on or date.today()
        return await self.next_code(db_models.FeePayments.receipt_number, f"MREC{on:%y}", 6)
