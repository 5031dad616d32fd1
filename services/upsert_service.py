"""
Idempotent product upsert.

Each canonical product is classified as inserted / updated / unchanged:
- Identity key (by source) finds the existing record, if any
- A content hash stored in attributes["_sync_hash"] detects no-op re-syncs
- Updates overwrite core fields and shallow-merge attributes, so keys
  written by other sources survive

Batches never abort on a single failure and hold no transaction; reruns
are safe because unchanged products skip the write.
"""

import hashlib
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

import structlog

from models.ingest import UpsertAction, UpsertResult, UpsertSummary
from models.product import CanonicalProduct, ProductSource, SYNC_HASH_KEY
from services.product_store import ProductStore

logger = structlog.get_logger(__name__)

HASHED_FIELDS = ("title", "brand", "category", "price", "currency", "quantity", "sku")


# ===================
# CONTENT HASH
# ===================

def compute_content_hash(product: CanonicalProduct) -> str:
    """
    SHA-1 over the fields that decide whether a product changed.

    image_urls are sorted and attribute keys are sorted, so neither
    ordering affects the digest. The reserved hash key is ignored.
    """
    payload: dict[str, Any] = {name: getattr(product, name) for name in HASHED_FIELDS}
    payload["image_urls"] = sorted(product.image_urls) if product.image_urls is not None else None
    payload["attributes"] = {
        key: value
        for key, value in product.attributes.items()
        if key != SYNC_HASH_KEY
    }

    serialized = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha1(serialized.encode("utf-8")).hexdigest()


# ===================
# IDENTITY KEY
# ===================

@dataclass(frozen=True)
class IdentityKey:
    """Store lookup used to find the existing record for a product."""
    org_id: str
    filters: tuple[tuple[str, str], ...]

    @property
    def matched_on(self) -> str:
        return "+".join(["org_id", *(column for column, _ in self.filters)])

    def as_filters(self) -> dict[str, str]:
        return dict(self.filters)


def resolve_identity_key(product: CanonicalProduct) -> Optional[IdentityKey]:
    """
    Pick the lookup key, in strict precedence:

    1. external-catalog source: merchant_product_id (+ source)
    2. merchant_product_id + merchant_variant_id
    3. sku
    4. None - the product is always inserted
    """
    if product.source == ProductSource.EXTERNAL_CATALOG.value:
        if not product.merchant_product_id:
            return None
        return IdentityKey(
            org_id=product.org_id,
            filters=(
                ("merchant_product_id", product.merchant_product_id),
                ("source", ProductSource.EXTERNAL_CATALOG.value),
            ),
        )

    if product.merchant_product_id and product.merchant_variant_id:
        return IdentityKey(
            org_id=product.org_id,
            filters=(
                ("merchant_product_id", product.merchant_product_id),
                ("merchant_variant_id", product.merchant_variant_id),
            ),
        )

    if product.sku:
        return IdentityKey(org_id=product.org_id, filters=(("sku", product.sku),))

    return None


# ===================
# UPSERT ENGINE
# ===================

class UpsertService:
    """
    Writes canonical products to the store without duplicating them.
    """

    def __init__(self, store: Optional[ProductStore] = None, logger=None):
        self.logger = logger or structlog.get_logger(__name__)
        self.store = store if store is not None else ProductStore(logger=self.logger)

    def upsert_product(self, product: CanonicalProduct) -> UpsertResult:
        """
        Insert, update, or skip one product.

        Returns:
            UpsertResult with the action, record id and matched key

        Raises:
            DatabaseError: If the store read or write fails
        """
        content_hash = compute_content_hash(product)
        record = product.to_record()
        record["attributes"][SYNC_HASH_KEY] = content_hash
        record["updated_at"] = datetime.now(timezone.utc).isoformat()

        key = resolve_identity_key(product)
        if key is None:
            record_id = self.store.insert(record)
            return UpsertResult(action=UpsertAction.INSERTED, record_id=record_id)

        existing = self.store.find(
            key.org_id,
            key.as_filters(),
            columns="id, attributes, updated_at",
        )

        if not existing:
            record_id = self._insert(product, record)
            return UpsertResult(
                action=UpsertAction.INSERTED,
                record_id=record_id,
                matched_on=key.matched_on,
            )

        if len(existing) > 1:
            # Left for the duplicate reconciler
            self.logger.warning(
                "multiple_records_matched",
                org_id=key.org_id,
                matched_on=key.matched_on,
                count=len(existing)
            )

        current = existing[0]
        current_attributes = current.get("attributes") or {}
        record_id = str(current["id"])

        if current_attributes.get(SYNC_HASH_KEY) == content_hash:
            return UpsertResult(
                action=UpsertAction.UNCHANGED,
                record_id=record_id,
                matched_on=key.matched_on,
            )

        patch = {k: v for k, v in record.items() if k != "org_id"}
        patch["attributes"] = {**current_attributes, **record["attributes"]}
        self.store.update(record_id, patch)

        return UpsertResult(
            action=UpsertAction.UPDATED,
            record_id=record_id,
            matched_on=key.matched_on,
        )

    def _insert(self, product: CanonicalProduct, record: dict[str, Any]) -> str:
        """Insert after a lookup found nothing, labelling untitled products."""
        if not record.get("title"):
            # Last-resort label from the product's own first attribute
            first_value = next(iter(product.attributes.values()), None)
            if isinstance(first_value, str) and first_value:
                record["title"] = first_value
        return self.store.insert(record)

    def batch_upsert(self, products: Iterable[CanonicalProduct]) -> UpsertSummary:
        """
        Upsert products one at a time.

        A failure on one product is recorded and the rest are still
        attempted.

        Returns:
            UpsertSummary with counters and per-product error details
        """
        summary = UpsertSummary()

        for product in products:
            try:
                result = self.upsert_product(product)
            except Exception as e:
                summary.record_error(product.best_identifier, str(e))
                self.logger.error(
                    "product_upsert_failed",
                    product_id=product.best_identifier,
                    title=product.title,
                    error=str(e),
                    error_type=type(e).__name__
                )
                continue

            summary.record(result)
            self.logger.info(
                "product_upserted",
                action=result.action.value,
                record_id=result.record_id,
                matched_on=result.matched_on
            )

        self.logger.info(
            "batch_upsert_complete",
            seen=summary.seen,
            inserted=summary.inserted,
            updated=summary.updated,
            unchanged=summary.unchanged,
            errors=summary.errors
        )
        return summary
