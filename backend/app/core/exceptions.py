"""
Error kinds raised by the service layer.

Each kind is an HTTPException so FastAPI renders it directly; services raise
them the same way they would raise a bare HTTPException, with a detail that
names the offending record.
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """Record absent, or owned by another user."""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """Duplicate traveller key or lost optimistic-lock race."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class PreconditionError(HTTPException):
    """Operation would break an aggregate invariant."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class SummaryUnavailableError(Exception):
    """The text-generation collaborator failed. Never leaves the summary service."""
