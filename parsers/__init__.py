"""
Catalog file parsers.
"""

from parsers.catalog_parser import (
    parse_catalog_file,
    CatalogParseResult,
)

__all__ = [
    "parse_catalog_file",
    "CatalogParseResult",
]
