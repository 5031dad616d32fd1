"""
Canonical product schema.

Every ingestion path (spreadsheet rows, external catalog) converges on
CanonicalProduct before it reaches the store.
"""

from pydantic import Field, JsonValue
from typing import Any, Optional
from enum import Enum
from datetime import datetime, timezone

from models.base import BaseSchema


class Condition(str, Enum):
    """Product condition."""
    NEW = "new"
    USED = "used"
    REFURBISHED = "refurbished"
    OPEN_BOX = "open_box"
    OTHER = "other"


class ProductSource(str, Enum):
    """Known origin tags. The source field itself stays a free string."""
    CSV = "csv"
    EXTERNAL_CATALOG = "external-catalog"


# Fields routed directly onto the product rather than into attributes
CORE_FIELDS = frozenset({
    "title",
    "description",
    "brand",
    "category",
    "condition",
    "price",
    "currency",
    "quantity",
    "image_urls",
    "sku",
    "global_id_type",
    "global_id_value",
    "merchant_product_id",
    "merchant_variant_id",
})

# Reserved attribute key carrying the previous content hash
SYNC_HASH_KEY = "_sync_hash"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CanonicalProduct(BaseSchema):
    """
    Normalized, source-agnostic product record.

    org_id is required and frozen; everything else is optional.
    attributes holds anything not promoted to a core field and is
    restricted to JSON values (str, number, bool, null, list, dict).
    """

    org_id: str = Field(
        ...,
        min_length=1,
        frozen=True,
        description="Tenant scope"
    )
    title: Optional[str] = None
    description: Optional[str] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    condition: Optional[Condition] = None
    price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)
    image_urls: Optional[list[str]] = None
    sku: Optional[str] = None
    global_id_type: Optional[str] = None
    global_id_value: Optional[str] = None
    merchant_product_id: Optional[str] = None
    merchant_variant_id: Optional[str] = None
    attributes: dict[str, JsonValue] = Field(default_factory=dict)
    source: str = Field(default=ProductSource.CSV.value)
    source_updated_at: datetime = Field(default_factory=utc_now)

    @property
    def best_identifier(self) -> str:
        """Identifier used in error reports."""
        return self.merchant_product_id or self.sku or "unknown"

    def to_record(self) -> dict[str, Any]:
        """Serialize to a JSON-ready store row."""
        return self.model_dump(mode="json")
