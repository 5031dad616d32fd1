"""
External catalog sync.

Pulls every product page from Shopify, normalizes each product and
upserts the page before fetching the next one.
"""

from typing import Optional

import structlog

from config.settings import Settings
from integrations.shopify import ShopifyClient, org_id_from_shop_domain
from models.ingest import DEFAULT_ERROR_SAMPLE_SIZE, SyncReport
from services.catalog_normalizer_service import normalize_external_product
from services.upsert_service import UpsertService

logger = structlog.get_logger(__name__)


class CatalogSyncService:
    """
    Mirrors one shop's catalog into the product store.
    """

    def __init__(
        self,
        client: ShopifyClient,
        upsert_service: Optional[UpsertService] = None,
        error_sample_size: Optional[int] = DEFAULT_ERROR_SAMPLE_SIZE,
        logger=None,
    ):
        self.client = client
        self.error_sample_size = error_sample_size
        self.logger = logger or structlog.get_logger(__name__)
        self.upsert_service = upsert_service if upsert_service is not None else UpsertService(logger=self.logger)

    @classmethod
    def from_settings(cls, settings: Settings, logger=None) -> "CatalogSyncService":
        """
        Build a sync for the configured shop.

        Raises:
            CatalogNotConfiguredError: If the shop domain or token is missing
        """
        return cls(
            ShopifyClient.from_settings(settings),
            error_sample_size=settings.error_sample_size,
            logger=logger,
        )

    def sync(self, org_id: Optional[str] = None) -> SyncReport:
        """
        Run a full catalog sync.

        Args:
            org_id: Tenant scope; derived from the shop domain when omitted

        Returns:
            SyncReport aggregating every page's upsert summary

        Raises:
            CatalogFetchError: If the upstream API fails mid-sync; pages
                               already upserted stay written
        """
        shop_domain = self.client.shop_domain
        org_id = org_id or org_id_from_shop_domain(shop_domain)
        report = SyncReport(
            org_id=org_id,
            shop_domain=shop_domain,
            error_sample_size=self.error_sample_size,
        )

        currency = self.client.get_shop_currency()
        self.logger.info(
            "catalog_sync_started",
            shop=shop_domain,
            org_id=org_id,
            currency=currency
        )

        for batch in self.client.iter_product_pages():
            report.pages += 1
            products = []
            for product in batch:
                try:
                    products.append(
                        normalize_external_product(product, org_id, shop_domain, currency)
                    )
                except ValueError as e:
                    report.summary.record_error(product.id, str(e))
                    self.logger.warning(
                        "product_normalization_failed",
                        org_id=org_id,
                        product_id=product.id,
                        error=str(e)
                    )

            report.summary.merge(self.upsert_service.batch_upsert(products))

            self.logger.info(
                "catalog_sync_progress",
                org_id=org_id,
                page=report.pages,
                seen=report.summary.seen,
                inserted=report.summary.inserted,
                updated=report.summary.updated,
                unchanged=report.summary.unchanged,
                errors=report.summary.errors
            )

        self.logger.info("catalog_sync_complete", org_id=org_id, pages=report.pages)
        return report
