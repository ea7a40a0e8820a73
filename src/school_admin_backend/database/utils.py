'''
Helpers shared by the service layer for writing to the database.
'''
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.exceptions import ConflictError
from ..common.logger import log


@asynccontextmanager
async def savepoint(db: AsyncSession, conflict_message: str) -> AsyncIterator[None]:
    """
    Runs the enclosed writes inside a SAVEPOINT and flushes them on exit.

    A unique or check constraint violation rolls back only the savepoint
    and is re-raised as a ConflictError carrying `conflict_message`, so the
    caller's outer transaction stays usable (bulk operations rely on this).
    """
    try:
        async with db.begin_nested():
            yield
    except IntegrityError as e:
        log.warning(f"Constraint violation, savepoint rolled back: {e.orig}")
        raise ConflictError(conflict_message) from e
