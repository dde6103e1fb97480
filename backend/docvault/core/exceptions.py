"""
Custom exception classes for the application.

Services raise members of the DocVaultError family; the HTTP layer maps
each one to its status code in a single exception handler.
"""

from fastapi import HTTPException, status


class DocVaultError(Exception):
    """Base exception for all domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal server error"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(DocVaultError):
    """Raised for invalid input data."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad request"


class ForbiddenError(DocVaultError):
    """Raised when a role or access check fails."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access forbidden"


class NotFoundError(DocVaultError):
    """Raised when a requested resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class ConflictError(DocVaultError):
    """Raised when a unique constraint would be violated."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists"


class StorageError(DocVaultError):
    """Raised when the underlying store is unavailable or a write fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Storage failure"


class CredentialsException(HTTPException):
    """Exception raised when authentication credentials are invalid."""

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )
