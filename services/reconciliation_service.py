"""
Duplicate reconciler.

Sweeps external-catalog records for identities stored more than once,
merges each group into its most recently updated member and deletes the
rest. The survivor is written before any loser is deleted, so a crash in
between leaves extra rows, never lost data, and a rerun finishes the job.
"""

from collections import Counter
from datetime import datetime, timezone
from typing import Any, Optional

import structlog

from exceptions import AppError, ReconciliationError
from config.settings import Settings
from models.ingest import (
    DEFAULT_ERROR_SAMPLE_SIZE,
    DuplicateGroup,
    ErrorDetail,
    ReconciliationSummary,
)
from models.product import ProductSource
from services.product_store import ProductStore

logger = structlog.get_logger(__name__)

MERGED_FIELDS = ("title", "brand", "category", "price", "currency", "quantity", "sku")


def merge_group(members: list[dict[str, Any]]) -> dict[str, Any]:
    """
    Merge duplicate records into the survivor's patch.

    Args:
        members: Group rows ordered newest first; members[0] survives

    Returns:
        Patch for the survivor: its own core fields, the sorted union of
        all image URLs, and attributes where the survivor wins overlapping
        keys, other members contribute missing keys and variants are
        unioned by id (newer members override older ones)
    """
    if not members:
        raise ValueError("Cannot merge an empty group")

    survivor = members[0]
    image_urls: set[str] = set()
    variants: dict[str, Any] = {}
    attributes: dict[str, Any] = {}

    # Oldest -> newest so the survivor is applied last
    for member in reversed(members):
        for url in member.get("image_urls") or []:
            if url and isinstance(url, str):
                image_urls.add(url)

        member_attributes = member.get("attributes") or {}
        for variant in member_attributes.get("variants") or []:
            if isinstance(variant, dict) and variant.get("id"):
                variants[variant["id"]] = variant

        attributes.update(member_attributes)

    if variants:
        attributes["variants"] = list(variants.values())

    patch = {name: survivor.get(name) for name in MERGED_FIELDS}
    patch["image_urls"] = sorted(image_urls)
    patch["attributes"] = attributes
    return patch


class ReconciliationService:
    """
    Enforces one stored record per (org_id, merchant_product_id) for
    external-catalog products.
    """

    def __init__(
        self,
        store: Optional[ProductStore] = None,
        error_sample_size: Optional[int] = DEFAULT_ERROR_SAMPLE_SIZE,
        logger=None,
    ):
        self.logger = logger or structlog.get_logger(__name__)
        self.store = store if store is not None else ProductStore(logger=self.logger)
        self.source = ProductSource.EXTERNAL_CATALOG.value
        self.error_sample_size = error_sample_size

    @classmethod
    def from_settings(cls, settings: Settings, logger=None) -> "ReconciliationService":
        return cls(error_sample_size=settings.error_sample_size, logger=logger)

    def find_duplicate_groups(self) -> list[DuplicateGroup]:
        """
        Group external-catalog records by identity.

        Returns:
            Groups with more than one member, largest first
        """
        rows = self.store.find_all(
            None,
            {"source": self.source},
            columns="id, org_id, merchant_product_id",
        )

        counts = Counter(
            (row["org_id"], row["merchant_product_id"])
            for row in rows
            if row.get("merchant_product_id")
        )

        groups = [
            DuplicateGroup(org_id=org_id, merchant_product_id=product_id, duplicate_count=count)
            for (org_id, product_id), count in counts.items()
            if count > 1
        ]
        groups.sort(key=lambda g: g.duplicate_count, reverse=True)
        return groups

    def reconcile_group(self, group: DuplicateGroup) -> int:
        """
        Merge one group into its newest member and delete the others.

        Returns:
            Number of records deleted

        Raises:
            ReconciliationError: If the merge or either write fails
        """
        try:
            members = self.store.find(
                group.org_id,
                {
                    "merchant_product_id": group.merchant_product_id,
                    "source": self.source,
                },
                order_by="updated_at",
                descending=True,
            )

            if len(members) <= 1:
                self.logger.info(
                    "duplicate_group_already_clean",
                    org_id=group.org_id,
                    merchant_product_id=group.merchant_product_id
                )
                return 0

            patch = merge_group(members)
            patch["updated_at"] = datetime.now(timezone.utc).isoformat()

            survivor_id = str(members[0]["id"])
            loser_ids = [str(member["id"]) for member in members[1:]]

            self.store.update(survivor_id, patch)
            deleted = self.store.delete(loser_ids)

        except (AppError, ValueError, KeyError) as e:
            raise ReconciliationError(
                org_id=group.org_id,
                merchant_product_id=group.merchant_product_id,
                message=str(e)
            ) from e

        self.logger.info(
            "duplicate_group_merged",
            org_id=group.org_id,
            merchant_product_id=group.merchant_product_id,
            survivor_id=survivor_id,
            deleted=loser_ids
        )
        return deleted

    def reconcile(self) -> ReconciliationSummary:
        """
        Run one corrective sweep over all organizations.

        A failing group is recorded and the remaining groups are still
        processed.
        """
        summary = ReconciliationSummary(error_sample_size=self.error_sample_size)

        self.logger.info("duplicate_scan_started")
        groups = self.find_duplicate_groups()
        summary.groups_found = len(groups)

        if not groups:
            self.logger.info("no_duplicates_found")
            return summary

        for group in groups:
            try:
                deleted = self.reconcile_group(group)
            except ReconciliationError as e:
                summary.errors += 1
                summary.error_details.append(ErrorDetail(
                    id=f"{group.org_id}:{group.merchant_product_id}",
                    error=e.message
                ))
                self.logger.error(
                    "duplicate_group_failed",
                    org_id=group.org_id,
                    merchant_product_id=group.merchant_product_id,
                    error=e.message
                )
                continue

            if deleted:
                summary.groups_merged += 1
                summary.records_deleted += deleted

        self.logger.info(
            "duplicate_scan_complete",
            groups_found=summary.groups_found,
            groups_merged=summary.groups_merged,
            records_deleted=summary.records_deleted,
            errors=summary.errors
        )
        return summary
