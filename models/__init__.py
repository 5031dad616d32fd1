"""
Pydantic models and result types.
"""

from models.base import BaseSchema
from models.product import (
    CanonicalProduct,
    Condition,
    ProductSource,
    CORE_FIELDS,
    SYNC_HASH_KEY,
)
from models.mapping import TransformOp, TransformSpec, MappingRule
from models.external_catalog import (
    CatalogPage,
    ExternalImage,
    ExternalProduct,
    ExternalVariant,
)
from models.ingest import (
    DEFAULT_ERROR_SAMPLE_SIZE,
    UpsertAction,
    UpsertResult,
    UpsertSummary,
    ErrorDetail,
    RowError,
    IngestionReport,
    SyncReport,
    DuplicateGroup,
    ReconciliationSummary,
)

__all__ = [
    "BaseSchema",
    "CanonicalProduct",
    "Condition",
    "ProductSource",
    "CORE_FIELDS",
    "SYNC_HASH_KEY",
    "TransformOp",
    "TransformSpec",
    "MappingRule",
    "CatalogPage",
    "ExternalImage",
    "ExternalProduct",
    "ExternalVariant",
    "DEFAULT_ERROR_SAMPLE_SIZE",
    "UpsertAction",
    "UpsertResult",
    "UpsertSummary",
    "ErrorDetail",
    "RowError",
    "IngestionReport",
    "SyncReport",
    "DuplicateGroup",
    "ReconciliationSummary",
]
