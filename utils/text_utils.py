"""
Text utilities for matching spreadsheet headers and building attribute keys.
"""

import re
from typing import Optional, Union

_WHITESPACE = re.compile(r"\s+")
_NON_KEY_CHARS = re.compile(r"[^a-z0-9_ ]")
_UNDERSCORES = re.compile(r"_+")
_CURRENCY_SYMBOLS = re.compile(r"[$€£¥]")
_NUMERIC = re.compile(r"^-?(?=[\d,]*\d)[\d,]+(\.\d+)?$")


def normalize_header(header: str) -> str:
    """
    Normalize a header for case/whitespace-insensitive matching.

    - "\\ufeffSKU" → "sku"
    - "  Product   Name " → "product name"
    """
    if header.startswith("\ufeff"):
        header = header[1:]
    return _WHITESPACE.sub(" ", header.strip()).lower()


def normalize_attribute_key(key: str) -> str:
    """
    Turn an arbitrary header into a safe lower_snake_case attribute key.

    - "Custom-Field!" → "custom_field"
    - "PDP URL" → "pdp_url"
    """
    key = _WHITESPACE.sub(" ", key.strip()).lower()
    key = _NON_KEY_CHARS.sub("_", key)
    key = key.replace(" ", "_")
    key = _UNDERSCORES.sub("_", key)
    return key.strip("_")


def parse_numeric_string(value: str) -> Optional[Union[int, float]]:
    """
    Parse a string that is purely a number, else return None.

    Accepts an optional leading "-", thousands separators and at most one
    decimal point. Currency symbols are stripped before the check.
    Whole numbers come back as int.

    - "100" → 100
    - "$1,299.99" → 1299.99
    - "12 units" → None
    """
    candidate = _CURRENCY_SYMBOLS.sub("", value.strip())
    if not _NUMERIC.match(candidate):
        return None

    candidate = candidate.replace(",", "")
    if "." in candidate:
        return float(candidate)
    return int(candidate)
