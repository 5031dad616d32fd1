"""
Payload schemas for products fetched from the external catalog
(Shopify Admin GraphQL API).

Field aliases follow the API's camelCase names.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ExternalSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SelectedOption(ExternalSchema):
    name: str
    value: str


class ExternalVariant(ExternalSchema):
    id: str
    title: Optional[str] = None
    sku: Optional[str] = None
    # Money comes back as a decimal string
    price: Optional[Union[str, float]] = None
    available_for_sale: bool = Field(False, alias="availableForSale")
    inventory_quantity: Optional[int] = Field(None, alias="inventoryQuantity")
    selected_options: list[SelectedOption] = Field(
        default_factory=list,
        alias="selectedOptions"
    )


class ExternalImage(ExternalSchema):
    url: str


class ImageConnection(ExternalSchema):
    nodes: list[ExternalImage] = Field(default_factory=list)


class VariantConnection(ExternalSchema):
    nodes: list[ExternalVariant] = Field(default_factory=list)


class ExternalProduct(ExternalSchema):
    """One product node with nested variants and images."""
    id: str
    title: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = Field(None, alias="productType")
    handle: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    status: Optional[str] = None
    body_html: Optional[str] = Field(None, alias="bodyHtml")
    images: ImageConnection = Field(default_factory=ImageConnection)
    variants: VariantConnection = Field(default_factory=VariantConnection)


class CatalogPage(ExternalSchema):
    """One page of products plus the continuation cursor."""
    products: list[ExternalProduct] = Field(default_factory=list)
    has_next_page: bool = False
    end_cursor: Optional[str] = None
