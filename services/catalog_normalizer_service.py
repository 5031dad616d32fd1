"""
External catalog normalizer.

Folds one fetched Shopify product (all of its variants and images) into a
single CanonicalProduct. Products are always stored at parent-product
granularity; variants travel inside attributes.
"""

from typing import Any, Optional, Union

from models.external_catalog import ExternalProduct, ExternalVariant
from models.product import CanonicalProduct, ProductSource, utc_now


def _price_to_number(price: Optional[Union[str, float]]) -> Optional[float]:
    if price is None or price == "":
        return None
    try:
        return float(price)
    except (TypeError, ValueError):
        return None


def normalize_variant(variant: ExternalVariant) -> dict[str, Any]:
    """Attribute-safe representation of one variant."""
    return {
        "id": variant.id,
        "sku": variant.sku or "",
        "title": variant.title,
        "price": _price_to_number(variant.price),
        "available": variant.available_for_sale,
        "quantity": variant.inventory_quantity,
        "options": {
            option.name.lower(): option.value
            for option in variant.selected_options
        },
    }


def normalize_external_product(
    product: Union[ExternalProduct, dict],
    org_id: str,
    shop_domain: str,
    currency: Optional[str] = None,
) -> CanonicalProduct:
    """
    Convert a fetched product into the canonical shape.

    Args:
        product: ExternalProduct or the raw GraphQL node
        org_id: Tenant scope
        shop_domain: Shop the product came from (used for the PDP URL)
        currency: Shop currency code

    Returns:
        CanonicalProduct with source="external-catalog"
    """
    if isinstance(product, dict):
        product = ExternalProduct.model_validate(product)

    variants = product.variants.nodes
    first_variant = variants[0] if variants else None
    single_variant = first_variant if len(variants) == 1 else None

    # Oversold variants report negative stock; the canonical quantity floors at 0
    total_quantity = sum(v.inventory_quantity or 0 for v in variants)

    attributes = {
        "description_html": product.body_html or "",
        "handle": product.handle,
        "shop_domain": shop_domain,
        "variants": [normalize_variant(v) for v in variants],
        "pdp_url": f"https://{shop_domain}/products/{product.handle}",
        "tags": list(product.tags),
        "status": product.status,
        "vendor": product.vendor,
    }

    return CanonicalProduct(
        org_id=org_id,
        title=product.title,
        brand=product.vendor or None,
        category=product.product_type or None,
        price=_price_to_number(first_variant.price) if first_variant else None,
        currency=currency,
        quantity=max(total_quantity, 0),
        image_urls=[image.url for image in product.images.nodes],
        sku=(single_variant.sku or None) if single_variant else None,
        merchant_product_id=product.id,
        merchant_variant_id=single_variant.id if single_variant else None,
        attributes=attributes,
        source=ProductSource.EXTERNAL_CATALOG.value,
        source_updated_at=utc_now(),
    )
