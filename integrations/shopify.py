"""
Shopify Admin GraphQL client for catalog pulls.

Yields product pages lazily with a fixed pause between pages to respect
upstream rate limits. No retries happen here; callers decide.
"""

import time
from typing import Any, Iterator, Optional

import requests
import structlog

from config.settings import Settings
from exceptions import CatalogFetchError, CatalogNotConfiguredError
from models.external_catalog import CatalogPage, ExternalProduct

logger = structlog.get_logger(__name__)


SHOP_META_QUERY = """
query ShopMeta {
  shop {
    currencyCode
  }
}
"""

PRODUCTS_QUERY = """
query Products($first: Int!, $cursor: String) {
  products(first: $first, after: $cursor) {
    pageInfo {
      hasNextPage
      endCursor
    }
    nodes {
      id
      title
      vendor
      productType
      handle
      tags
      status
      bodyHtml
      images(first: 50) {
        nodes {
          url: originalSrc
        }
      }
      variants(first: 100) {
        nodes {
          id
          title
          sku
          price
          availableForSale
          inventoryQuantity
          selectedOptions {
            name
            value
          }
        }
      }
    }
  }
}
"""


def org_id_from_shop_domain(shop_domain: str) -> str:
    """
    Derive the org scope from a shop domain.

    Example: "beam-devtest.myshopify.com" → "beam-devtest"
    """
    domain = shop_domain.replace("https://", "").replace("http://", "").strip("/")
    return domain.replace(".myshopify.com", "")


def create_checkout_link(shop_domain: str, variant_id: str, qty: int = 1) -> str:
    """
    Build a cart permalink for one variant.

    Accepts either a numeric id or a GID such as
    "gid://shopify/ProductVariant/123".
    """
    if qty < 1:
        raise ValueError("qty must be at least 1")
    numeric_id = str(variant_id).rsplit("/", 1)[-1]
    return f"https://{shop_domain}/cart/{numeric_id}:{qty}"


class ShopifyClient:
    """
    Paginated catalog fetch collaborator.

    Usage:
        client = ShopifyClient("my-store.myshopify.com", "shpat_xxx")
        currency = client.get_shop_currency()
        for page in client.iter_product_pages():
            ...
    """

    def __init__(
        self,
        shop_domain: str,
        admin_token: str,
        api_version: str = "2024-01",
        page_size: int = 100,
        page_delay_seconds: float = 0.25,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        self.shop_domain = shop_domain.replace("https://", "").replace("http://", "").strip("/")
        self.api_version = api_version
        self.page_size = page_size
        self.page_delay_seconds = page_delay_seconds
        self.timeout = timeout
        self.graphql_url = f"https://{self.shop_domain}/admin/api/{api_version}/graphql.json"

        self.session = session or requests.Session()
        self.session.headers.update({
            "X-Shopify-Access-Token": admin_token,
            "Content-Type": "application/json",
        })

    @classmethod
    def from_settings(cls, settings: Settings) -> "ShopifyClient":
        """
        Build a client from application settings.

        Raises:
            CatalogNotConfiguredError: If domain or token is missing
        """
        missing = []
        if not settings.shopify_shop_domain:
            missing.append("SHOPIFY_SHOP_DOMAIN")
        if not settings.shopify_admin_token:
            missing.append("SHOPIFY_ADMIN_TOKEN")
        if missing:
            raise CatalogNotConfiguredError(missing)

        return cls(
            shop_domain=settings.shopify_shop_domain,
            admin_token=settings.shopify_admin_token,
            api_version=settings.shopify_api_version,
            page_size=settings.catalog_page_size,
            page_delay_seconds=settings.catalog_page_delay_seconds,
        )

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.session.close()

    def close(self):
        self.session.close()

    def graphql(self, query: str, variables: Optional[dict[str, Any]] = None) -> dict:
        """
        Execute a GraphQL query.

        Returns:
            The response "data" object

        Raises:
            CatalogFetchError: On transport failure, HTTP error status or
                               GraphQL errors
        """
        try:
            response = self.session.post(
                self.graphql_url,
                json={"query": query, "variables": variables or {}},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("catalog_request_failed", shop=self.shop_domain, error=str(e))
            raise CatalogFetchError(
                message=f"Shopify request failed: {e}",
                details={"shop_domain": self.shop_domain}
            ) from e

        if response.status_code >= 400:
            logger.error(
                "catalog_http_error",
                shop=self.shop_domain,
                status_code=response.status_code
            )
            raise CatalogFetchError(
                message=f"Shopify API error: {response.status_code}",
                details={"status_code": response.status_code, "body": response.text[:200]}
            )

        payload = response.json()
        if payload.get("errors"):
            logger.error("catalog_graphql_errors", shop=self.shop_domain, errors=payload["errors"])
            raise CatalogFetchError(
                message="Shopify GraphQL errors",
                details={"errors": payload["errors"]}
            )

        return payload.get("data") or {}

    def get_shop_currency(self) -> Optional[str]:
        """Shop's default currency code (e.g. "USD")."""
        data = self.graphql(SHOP_META_QUERY)
        return (data.get("shop") or {}).get("currencyCode")

    def fetch_page(self, cursor: Optional[str] = None) -> CatalogPage:
        """Fetch one page of products starting after cursor."""
        variables: dict[str, Any] = {"first": self.page_size}
        if cursor:
            variables["cursor"] = cursor

        data = self.graphql(PRODUCTS_QUERY, variables)
        products = data.get("products") or {}
        page_info = products.get("pageInfo") or {}

        return CatalogPage(
            products=[ExternalProduct.model_validate(node) for node in products.get("nodes") or []],
            has_next_page=bool(page_info.get("hasNextPage")),
            end_cursor=page_info.get("endCursor"),
        )

    def iter_product_pages(self) -> Iterator[list[ExternalProduct]]:
        """
        Lazily yield product batches, one per page.

        Each page is fetched once, on demand. The generator sleeps
        page_delay_seconds before requesting the next page.
        """
        cursor = None
        page_number = 0

        while True:
            page = self.fetch_page(cursor)
            page_number += 1
            logger.info(
                "catalog_page_fetched",
                shop=self.shop_domain,
                page=page_number,
                products=len(page.products),
                has_next=page.has_next_page
            )

            yield page.products

            if not page.has_next_page or not page.end_cursor:
                break

            cursor = page.end_cursor
            time.sleep(self.page_delay_seconds)
