"""
Catalog services.

Each service handles one stage of ingestion or reconciliation.
"""

from services.transform_service import apply_transform
from services.mapping_rule_service import (
    MappingRuleService,
    get_default_mapping_rules,
)
from services.mapper_service import RowMapper, map_row_to_product
from services.catalog_normalizer_service import normalize_external_product
from services.product_store import ProductStore
from services.upsert_service import (
    UpsertService,
    IdentityKey,
    compute_content_hash,
    resolve_identity_key,
)
from services.reconciliation_service import ReconciliationService, merge_group
from services.ingestion_service import IngestionService
from services.catalog_sync_service import CatalogSyncService

__all__ = [
    "apply_transform",
    "MappingRuleService",
    "get_default_mapping_rules",
    "RowMapper",
    "map_row_to_product",
    "normalize_external_product",
    "ProductStore",
    "UpsertService",
    "IdentityKey",
    "compute_content_hash",
    "resolve_identity_key",
    "ReconciliationService",
    "merge_group",
    "IngestionService",
    "CatalogSyncService",
]
