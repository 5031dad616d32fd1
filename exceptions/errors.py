"""
Custom exception classes for the catalog engine.

Batch loops catch these per product / per group and record them;
nothing here is meant to escape a partially failed batch.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "MAPPING_ERROR")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# INGESTION ERRORS
# ===================

class MappingError(ValidationError):
    """A raw row could not be turned into a canonical product."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="MAPPING_ERROR",
            message=message,
            details=details
        )


class CatalogParseError(ValidationError):
    """Catalog file parsing failed."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="CATALOG_PARSE_ERROR",
            message=message,
            details=details
        )


# ===================
# EXTERNAL CATALOG ERRORS
# ===================

class CatalogFetchError(ExternalServiceError):
    """Upstream catalog API returned an error."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="shopify",
            message=message,
            details=details
        )


class CatalogNotConfiguredError(ValidationError):
    """External catalog credentials missing."""

    def __init__(self, missing: list[str]):
        super().__init__(
            code="CATALOG_NOT_CONFIGURED",
            message="External catalog connector is not configured",
            details={"missing": missing}
        )


# ===================
# RECONCILIATION ERRORS
# ===================

class ReconciliationError(AppError):
    """One duplicate group could not be merged."""

    def __init__(
        self,
        org_id: str,
        merchant_product_id: str,
        message: str
    ):
        super().__init__(
            code="RECONCILIATION_ERROR",
            message=message,
            status_code=500,
            details={
                "org_id": org_id,
                "merchant_product_id": merchant_product_id
            }
        )
