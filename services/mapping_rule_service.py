"""
Mapping rule store.

Loads an organization's ordered CSV mapping rules from the
field_mappings table and falls back to the built-in defaults.
"""

import json
from typing import Optional

import structlog

from config import get_supabase_client
from models.mapping import MappingRule, TransformSpec

logger = structlog.get_logger(__name__)


_TO_NUMBER = TransformSpec(op="to_number")
_SPLIT_PIPE = TransformSpec(op="split", args={"delimiter": "|"})

DEFAULT_MAPPING_RULES: tuple[MappingRule, ...] = (
    MappingRule(source_field="Product Name", internal_field="title"),
    MappingRule(source_field="Title", internal_field="title"),
    MappingRule(source_field="Name", internal_field="title"),
    MappingRule(source_field="MSRP", internal_field="price", transform=_TO_NUMBER),
    MappingRule(source_field="Price", internal_field="price", transform=_TO_NUMBER),
    MappingRule(source_field="Cost", internal_field="price", transform=_TO_NUMBER),
    MappingRule(source_field="Images", internal_field="image_urls", transform=_SPLIT_PIPE),
    MappingRule(source_field="Image URLs", internal_field="image_urls", transform=_SPLIT_PIPE),
    MappingRule(source_field="SKU", internal_field="sku"),
    MappingRule(source_field="Brand", internal_field="brand"),
    MappingRule(source_field="Category", internal_field="category"),
    MappingRule(source_field="Description", internal_field="description"),
    MappingRule(source_field="Quantity", internal_field="quantity", transform=_TO_NUMBER),
    MappingRule(source_field="Stock", internal_field="quantity", transform=_TO_NUMBER),
    MappingRule(source_field="Currency", internal_field="currency"),
    MappingRule(source_field="Condition", internal_field="condition"),
)


def get_default_mapping_rules() -> list[MappingRule]:
    """Built-in rules for common catalog headers, in application order."""
    return list(DEFAULT_MAPPING_RULES)


class MappingRuleService:
    """
    Reads mapping rules for an organization.

    Rules are returned in table id order, which is also the order the
    row mapper applies them in.
    """

    def __init__(self, client=None, logger=None):
        self.db = client if client is not None else get_supabase_client()
        self.table = "field_mappings"
        self.logger = logger or structlog.get_logger(__name__)

    def load(self, org_id: str) -> list[MappingRule]:
        """
        Load ordered mapping rules for an organization.

        Args:
            org_id: Tenant scope

        Returns:
            Stored rules, or the default rules when none are stored or
            the store cannot be read
        """
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("org_id", org_id)
                .eq("source", "csv")
                .order("id")
                .execute()
            )
        except Exception as e:
            self.logger.error(
                "load_mapping_rules_failed",
                org_id=org_id,
                error=str(e)
            )
            return get_default_mapping_rules()

        rules = []
        for row in result.data or []:
            rule = self._row_to_rule(row)
            if rule is not None:
                rules.append(rule)

        if not rules:
            self.logger.info("using_default_mapping_rules", org_id=org_id)
            return get_default_mapping_rules()

        self.logger.info("mapping_rules_loaded", org_id=org_id, count=len(rules))
        return rules

    def _row_to_rule(self, row: dict) -> Optional[MappingRule]:
        """Build a rule from a stored row; malformed rows are skipped."""
        transform = row.get("transform_spec")
        try:
            if isinstance(transform, str):
                transform = json.loads(transform) if transform.strip() else None
            return MappingRule(
                source_field=row.get("source_field") or "",
                internal_field=row.get("internal_field") or "",
                transform=transform,
            )
        except ValueError as e:
            # pydantic.ValidationError and json.JSONDecodeError are both ValueErrors
            self.logger.warning(
                "invalid_mapping_rule_skipped",
                rule_id=row.get("id"),
                error=str(e)
            )
            return None
