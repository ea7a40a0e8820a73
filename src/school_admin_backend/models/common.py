'''
Shared response shapes.
'''
from typing import Any

from pydantic import BaseModel, Field


class BulkFailure(BaseModel):
    data: Any
    error: str


class BulkResult(BaseModel):
    """
    Outcome of a bulk operation. Each input item lands in exactly one
    of the two lists; a failing item never aborts the rest of the batch.
    """
    success: list[Any] = Field(default_factory=list)
    failed: list[BulkFailure] = Field(default_factory=list)
