"""
Row mapper for spreadsheet-style catalogs.

Turns one raw row (header -> cell text) into a CanonicalProduct using an
ordered list of mapping rules. Headers left over after the rules run are
kept as attributes under normalized keys.
"""

from typing import Any, Optional, Sequence

import structlog
from pydantic import ValidationError as PydanticValidationError

from exceptions import MappingError
from models.mapping import MappingRule
from models.product import (
    CORE_FIELDS,
    CanonicalProduct,
    Condition,
    ProductSource,
    utc_now,
)
from services.transform_service import apply_transform, stringify
from utils.text_utils import (
    normalize_attribute_key,
    normalize_header,
    parse_numeric_string,
)

logger = structlog.get_logger(__name__)

ATTRIBUTE_PREFIX = "attributes."

_CONDITION_KEYWORDS = {
    "new": Condition.NEW,
    "brand new": Condition.NEW,
    "used": Condition.USED,
    "pre-owned": Condition.USED,
    "preowned": Condition.USED,
    "refurbished": Condition.REFURBISHED,
    "renewed": Condition.REFURBISHED,
    "open box": Condition.OPEN_BOX,
    "open-box": Condition.OPEN_BOX,
    "openbox": Condition.OPEN_BOX,
}


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def split_image_urls(value: Any) -> list[str]:
    """
    Coerce an image_urls value into a list.

    Lists are kept with empty entries dropped. Strings are split on "|"
    when present, else on ",", else taken as a single URL.
    """
    if isinstance(value, (list, tuple)):
        urls = [stringify(url).strip() for url in value if url is not None]
        return [url for url in urls if url]

    text = stringify(value)
    if "|" in text:
        pieces = text.split("|")
    elif "," in text:
        pieces = text.split(",")
    else:
        pieces = [text]
    return [piece.strip() for piece in pieces if piece.strip()]


def normalize_condition(value: Any) -> Condition:
    """
    Map free-text condition to the fixed enum.

    - "Brand New" → new
    - "Pre-Owned" → used
    - "Renewed" → refurbished
    - "Open-Box" → open_box
    - anything else → other
    """
    return _CONDITION_KEYWORDS.get(stringify(value).strip().lower(), Condition.OTHER)


def map_row_to_product(
    raw_row: dict[str, Any],
    org_id: str,
    rules: Sequence[MappingRule],
    log=None,
) -> CanonicalProduct:
    """
    Apply mapping rules to one raw row.

    Args:
        raw_row: Header -> cell value, as read from the file
        org_id: Tenant scope stamped on the product
        rules: Ordered rules; a later rule targeting the same field wins
        log: Optional structured logger

    Returns:
        CanonicalProduct with source="csv"

    Raises:
        MappingError: If the collected values violate the canonical schema
    """
    log = log or logger

    # normalized header -> original header
    header_index: dict[str, str] = {}
    for header in raw_row:
        header_index[normalize_header(str(header))] = header

    core: dict[str, Any] = {}
    attributes: dict[str, Any] = {}
    consumed: set[str] = set()

    for rule in rules:
        header = header_index.get(normalize_header(rule.source_field))
        if header is None:
            continue

        consumed.add(header)
        value = raw_row[header]
        if _is_blank(value):
            continue

        if rule.transform is not None:
            value = apply_transform(value, rule.transform, log=log)
            if value is None:
                continue

        if rule.internal_field == "image_urls":
            value = split_image_urls(value)
        elif rule.internal_field == "condition":
            value = normalize_condition(value)

        if rule.internal_field in CORE_FIELDS:
            core[rule.internal_field] = value
        elif rule.internal_field.startswith(ATTRIBUTE_PREFIX):
            attributes[rule.internal_field[len(ATTRIBUTE_PREFIX):]] = value
        else:
            attributes[rule.internal_field] = value

    for header, value in raw_row.items():
        if header in consumed or _is_blank(value):
            continue

        key = normalize_attribute_key(str(header))
        if not key:
            log.debug("unmapped_header_dropped", header=header)
            continue

        if isinstance(value, str):
            number = parse_numeric_string(value)
            attributes[key] = number if number is not None else value
        else:
            attributes[key] = value

    try:
        return CanonicalProduct(
            org_id=org_id,
            attributes=attributes,
            source=ProductSource.CSV.value,
            source_updated_at=utc_now(),
            **core,
        )
    except PydanticValidationError as e:
        raise MappingError(
            message="Row does not fit the canonical product schema",
            details={
                "fields": [".".join(str(p) for p in err["loc"]) for err in e.errors()],
                "errors": [err["msg"] for err in e.errors()],
            }
        ) from e


class RowMapper:
    """
    Maps rows for one organization with rules loaded once per batch.
    """

    def __init__(self, org_id: str, rules: Sequence[MappingRule], logger=None):
        self.org_id = org_id
        self.rules = list(rules)
        self.logger = logger or structlog.get_logger(__name__)

        self.logger.debug(
            "row_mapper_ready",
            org_id=org_id,
            rules=[f"{r.source_field} -> {r.internal_field}" for r in self.rules]
        )

    def map_row(self, raw_row: dict[str, Any]) -> CanonicalProduct:
        return map_row_to_product(raw_row, self.org_id, self.rules, log=self.logger)

    def header_map(self, headers: Sequence[str]) -> dict[str, Optional[str]]:
        """Which internal field each header resolves to (None if unmapped)."""
        by_header = {}
        for rule in self.rules:
            by_header[normalize_header(rule.source_field)] = rule.internal_field
        return {h: by_header.get(normalize_header(h)) for h in headers}
