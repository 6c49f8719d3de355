# ruff: noqa: D107
"""Base exception classes."""

from typing import Any

from fastapi import HTTPException


class BaseAppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={"message": message, "error_code": error_code, "details": details},
        )


class UnauthenticatedError(BaseAppException):
    """Exception raised when a request carries a missing, expired or unknown token."""

    def __init__(
        self,
        message: str = "Unauthorized",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message, status_code=401, error_code="UNAUTHORIZED", details=details
        )


class NotFoundError(BaseAppException):
    """Exception raised when a resource is not found.

    Also raised for private resources the caller may not read, so that the two
    cases cannot be told apart.
    """

    def __init__(
        self,
        message: str = "Not found",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, status_code=404, error_code="NOT_FOUND", details=details)


class ForbiddenError(BaseAppException):
    """Exception raised when a readable resource may not be modified by the caller."""

    def __init__(
        self,
        message: str = "Forbidden",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=403,
            error_code="FORBIDDEN",
            details=details,
        )


class ValidationError(BaseAppException):
    """Exception raised when validation fails."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class StorageFaultError(BaseAppException):
    """Exception raised when the blob store or the database cannot complete an I/O call."""

    def __init__(
        self,
        message: str = "Storage failure",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=500,
            error_code="STORAGE_FAULT",
            details=details,
        )


class InternalInconsistencyError(BaseAppException):
    """Exception raised when the catalog references bytes the blob store does not have."""

    def __init__(
        self,
        message: str = "File content is missing",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=500,
            error_code="INTERNAL_INCONSISTENCY",
            details=details,
        )
