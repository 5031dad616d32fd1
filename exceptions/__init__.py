"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Ingestion
    MappingError,
    CatalogParseError,

    # External catalog
    CatalogFetchError,
    CatalogNotConfiguredError,

    # Reconciliation
    ReconciliationError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Ingestion
    "MappingError",
    "CatalogParseError",

    # External catalog
    "CatalogFetchError",
    "CatalogNotConfiguredError",

    # Reconciliation
    "ReconciliationError",
]
