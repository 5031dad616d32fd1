"""
Unit tests for IngestionService.

Covers:
- Row mapping with explicit and stored rules
- Mapping errors recorded with row numbers
- File ingestion end to end against the in-memory store
- Re-ingesting the same file is a no-op
"""

import json
from io import StringIO

import pytest

from config.settings import Settings
from models.ingest import IngestionReport
from models.mapping import MappingRule, TransformSpec
from models.product import SYNC_HASH_KEY
from services.ingestion_service import IngestionService
from services.mapping_rule_service import MappingRuleService, get_default_mapping_rules

CATALOG_CSV = (
    "Product Name,MSRP,SKU,Images,Custom Field\n"
    "Widget Pro,29.99,WID-001,img1.jpg|img2.jpg,Special Value\n"
    "Gadget,15,GAD-002,,\n"
)


@pytest.fixture
def ingestion_service(mock_supabase, upsert_service):
    return IngestionService(
        rule_service=MappingRuleService(client=mock_supabase),
        upsert_service=upsert_service,
    )


class TestIngestRows:
    """Tests for IngestionService.ingest_rows()"""

    def test_widget_row_with_default_rules(self, ingestion_service, products_table, widget_row):
        # Act
        report = ingestion_service.ingest_rows([widget_row], "acme")

        # Assert
        assert report.rows_seen == 1
        assert report.rows_mapped == 1
        assert report.summary.inserted == 1
        assert report.success is True

        stored = products_table.rows[0]
        assert stored["title"] == "Widget Pro"
        assert stored["price"] == 29.99
        assert stored["sku"] == "WID-001"
        assert stored["image_urls"] == ["img1.jpg", "img2.jpg"]
        assert stored["attributes"]["custom_field"] == "Special Value"
        assert SYNC_HASH_KEY in stored["attributes"]

    def test_stored_rules_are_used(self, mock_supabase, ingestion_service, products_table):
        mock_supabase.set_table_data("field_mappings", [
            {"id": 1, "org_id": "acme", "source": "csv", "source_field": "Nombre",
             "internal_field": "title", "transform_spec": None},
            {"id": 2, "org_id": "acme", "source": "csv", "source_field": "Codigo",
             "internal_field": "sku", "transform_spec": json.dumps({"op": "regex", "args": {"pattern": "^(\\w+)-", "group": 1}})},
        ])

        report = ingestion_service.ingest_rows([{"Nombre": "Silla", "Codigo": "SIL-99"}], "acme")

        assert report.summary.inserted == 1
        assert products_table.rows[0]["title"] == "Silla"
        assert products_table.rows[0]["sku"] == "SIL"

    def test_explicit_rules_skip_the_rule_store(self, mock_supabase, ingestion_service):
        rules = [MappingRule(source_field="Cost", internal_field="price", transform=TransformSpec(op="to_number"))]

        ingestion_service.ingest_rows([{"Cost": "$1,200", "SKU": "A"}], "acme", rules=rules)

        assert mock_supabase.table("field_mappings").calls == []

    def test_rules_loaded_once_per_batch(self, mock_supabase, ingestion_service, widget_row):
        ingestion_service.ingest_rows([widget_row, dict(widget_row, SKU="WID-002")], "acme")

        assert mock_supabase.table("field_mappings").calls == ["select"]

    def test_bad_rows_recorded_and_skipped(self, ingestion_service, products_table):
        rows = [
            {"Product Name": "Good", "SKU": "G-1"},
            {"Product Name": "Bad", "Price": "-4", "SKU": "B-1"},
            {"Product Name": "Also Good", "SKU": "G-2"},
        ]

        report = ingestion_service.ingest_rows(rows, "acme")

        assert report.rows_seen == 3
        assert report.rows_mapped == 2
        assert report.summary.inserted == 2
        assert len(report.mapping_errors) == 1
        assert report.mapping_errors[0].row == 2
        assert report.total_errors == 1
        assert report.success is False
        assert len(products_table.rows) == 2

    def test_rerun_is_unchanged(self, ingestion_service, products_table, widget_row):
        ingestion_service.ingest_rows([widget_row], "acme")

        report = ingestion_service.ingest_rows([widget_row], "acme")

        assert report.summary.unchanged == 1
        assert report.summary.inserted == 0
        assert len(products_table.rows) == 1

    def test_store_failure_counted(self, ingestion_service, products_table, widget_row):
        products_table.fail_on = "select"

        report = ingestion_service.ingest_rows([widget_row], "acme", rules=get_default_mapping_rules())

        assert report.summary.errors == 1
        assert report.summary.error_details[0].id == "WID-001"
        assert report.total_errors == 1


class TestIngestFile:
    """Tests for IngestionService.ingest_file()"""

    def test_csv_file(self, ingestion_service, products_table):
        report = ingestion_service.ingest_file(StringIO(CATALOG_CSV), "acme", filename="catalog.csv")

        assert report.rows_seen == 2
        assert report.summary.inserted == 2
        gadget = next(r for r in products_table.rows if r["sku"] == "GAD-002")
        assert gadget["price"] == 15
        assert gadget["image_urls"] is None
        assert gadget["attributes"] == {SYNC_HASH_KEY: gadget["attributes"][SYNC_HASH_KEY]}

    def test_changed_file_updates(self, ingestion_service, products_table):
        ingestion_service.ingest_file(StringIO(CATALOG_CSV), "acme")
        changed = CATALOG_CSV.replace("29.99", "24.99")

        report = ingestion_service.ingest_file(StringIO(changed), "acme")

        assert report.summary.updated == 1
        assert report.summary.unchanged == 1
        widget = next(r for r in products_table.rows if r["sku"] == "WID-001")
        assert widget["price"] == 24.99

    def test_empty_file(self, ingestion_service):
        report = ingestion_service.ingest_file(StringIO(""), "acme")

        assert report.rows_seen == 0
        assert report.success is True


class TestErrorSampling:
    """Tests for the bounded error sample in ingestion reports"""

    def test_report_capped_at_sample_size(self, mock_supabase, upsert_service):
        # Arrange
        service = IngestionService(
            rule_service=MappingRuleService(client=mock_supabase),
            upsert_service=upsert_service,
            error_sample_size=3,
        )
        rows = [{"SKU": f"BAD-{n}", "Price": "-1"} for n in range(5)]

        # Act
        result = service.ingest_rows(rows, "acme").to_dict()

        # Assert
        assert result["total_errors"] == 5
        assert result["mapping_errors_count"] == 5
        assert [e["row"] for e in result["mapping_errors"]] == [1, 2, 3]

    def test_default_sample_size(self, ingestion_service):
        rows = [{"SKU": f"BAD-{n}", "Price": "-1"} for n in range(12)]

        result = ingestion_service.ingest_rows(rows, "acme").to_dict()

        assert result["mapping_errors_count"] == 12
        assert len(result["mapping_errors"]) == 10

    def test_from_settings_uses_configured_size(self, mock_db):
        settings = Settings(
            _env_file=None,
            supabase_url="https://x.supabase.co",
            supabase_key="anon",
            error_sample_size=2,
        )

        service = IngestionService.from_settings(settings)
        report = service.ingest_rows([{"SKU": f"B-{n}", "Price": "-1"} for n in range(4)], "acme")

        assert service.error_sample_size == 2
        assert len(report.to_dict()["mapping_errors"]) == 2
        assert service.upsert_service.store.db is mock_db


class TestIngestionReport:
    """Tests for IngestionReport.to_dict()"""

    def test_error_sample_is_bounded(self):
        report = IngestionReport(org_id="acme", rows_seen=20)
        for row in range(1, 16):
            report.summary.record_error(f"SKU-{row}", "boom")

        result = report.to_dict(max_errors=10)

        assert result["total_errors"] == 15
        assert result["summary"]["errors"] == 15
        assert len(result["summary"]["error_details"]) == 10
