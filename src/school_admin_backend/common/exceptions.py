"""
This file contains custom, application-specific exceptions.

Every error is an HTTPException subclass, so FastAPI serializes it as
{"detail": message} with the error's own status code.
"""
from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for errors raised by the service layer."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(status_code=self.status_code, detail=message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotFoundError(AppError):
    """Raised when a referenced row does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Raised on uniqueness or state violations (double booking, duplicate invoice, paid invoice)."""
    status_code = status.HTTP_400_BAD_REQUEST


class InputValidationError(AppError):
    """Raised when a request is well-formed but its values are unacceptable."""
    status_code = status.HTTP_400_BAD_REQUEST
