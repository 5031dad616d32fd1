"""
Catalog ingestion service.

Drives one spreadsheet upload end to end: parse the file, map every row
with the organization's rules (loaded once per batch), then upsert the
mapped products. Bad rows are recorded and skipped.
"""

from io import BytesIO, StringIO
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence, Union

import structlog

from config.settings import Settings
from exceptions import AppError
from models.ingest import DEFAULT_ERROR_SAMPLE_SIZE, IngestionReport, RowError
from models.mapping import MappingRule
from parsers.catalog_parser import parse_catalog_file
from services.mapper_service import RowMapper
from services.mapping_rule_service import MappingRuleService
from services.upsert_service import UpsertService

logger = structlog.get_logger(__name__)


class IngestionService:
    """
    Spreadsheet -> canonical product -> store.

    Handles:
    - Rule loading (stored rules or defaults)
    - Per-row mapping with error capture
    - Batch upsert and report assembly
    """

    def __init__(
        self,
        rule_service: Optional[MappingRuleService] = None,
        upsert_service: Optional[UpsertService] = None,
        error_sample_size: Optional[int] = DEFAULT_ERROR_SAMPLE_SIZE,
        logger=None,
    ):
        self.logger = logger or structlog.get_logger(__name__)
        self.error_sample_size = error_sample_size
        self.rule_service = rule_service if rule_service is not None else MappingRuleService(logger=self.logger)
        self.upsert_service = upsert_service if upsert_service is not None else UpsertService(logger=self.logger)

    @classmethod
    def from_settings(cls, settings: Settings, logger=None) -> "IngestionService":
        """Build with the default stores and the configured error sample size."""
        return cls(error_sample_size=settings.error_sample_size, logger=logger)

    def ingest_rows(
        self,
        rows: Iterable[dict[str, Any]],
        org_id: str,
        rules: Optional[Sequence[MappingRule]] = None,
    ) -> IngestionReport:
        """
        Map and upsert raw rows for one organization.

        Args:
            rows: Header -> value dicts
            org_id: Tenant scope
            rules: Explicit rules; loaded from the rule store when omitted

        Returns:
            IngestionReport with mapping errors and the upsert summary
        """
        if rules is None:
            rules = self.rule_service.load(org_id)
        mapper = RowMapper(org_id, rules, logger=self.logger)

        report = IngestionReport(org_id=org_id, error_sample_size=self.error_sample_size)
        products = []

        for index, row in enumerate(rows, start=1):
            report.rows_seen += 1
            try:
                products.append(mapper.map_row(row))
            except (AppError, TypeError, ValueError) as e:
                message = e.message if isinstance(e, AppError) else str(e)
                report.mapping_errors.append(RowError(row=index, error=message))
                self.logger.warning(
                    "row_mapping_failed",
                    org_id=org_id,
                    row=index,
                    error=message
                )

        report.rows_mapped = len(products)
        report.summary = self.upsert_service.batch_upsert(products)

        self.logger.info(
            "ingestion_complete",
            org_id=org_id,
            rows_seen=report.rows_seen,
            rows_mapped=report.rows_mapped,
            inserted=report.summary.inserted,
            updated=report.summary.updated,
            unchanged=report.summary.unchanged,
            total_errors=report.total_errors
        )
        return report

    def ingest_file(
        self,
        file: Union[str, Path, BytesIO, StringIO],
        org_id: str,
        filename: Optional[str] = None,
        rules: Optional[Sequence[MappingRule]] = None,
    ) -> IngestionReport:
        """
        Parse a catalog file and ingest its rows.

        Raises:
            CatalogParseError: If the file cannot be read at all
        """
        parsed = parse_catalog_file(file, filename=filename)

        if rules is None:
            rules = self.rule_service.load(org_id)

        self.logger.info(
            "catalog_header_map",
            org_id=org_id,
            header_map=RowMapper(org_id, rules, logger=self.logger).header_map(parsed.headers)
        )

        return self.ingest_rows(parsed.rows, org_id, rules=rules)
