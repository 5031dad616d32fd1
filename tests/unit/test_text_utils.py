"""
Unit tests for header / attribute key normalization.
"""

import pytest

from utils.text_utils import (
    normalize_attribute_key,
    normalize_header,
    parse_numeric_string,
)


class TestNormalizeHeader:
    """Tests for normalize_header()"""

    @pytest.mark.parametrize("header", [" Product Name ", "PRODUCT NAME", "Product Name", "Product   Name"])
    def test_variants_collapse_to_same_key(self, header):
        """Case and whitespace differences should not matter."""
        assert normalize_header(header) == normalize_header("Product Name") == "product name"

    def test_strips_byte_order_mark(self):
        """Leading BOM from Excel-exported CSVs should be removed."""
        assert normalize_header("\ufeffSKU") == "sku"

    def test_tabs_and_newlines_become_single_space(self):
        assert normalize_header("Image\t\nURLs") == "image urls"


class TestNormalizeAttributeKey:
    """Tests for normalize_attribute_key()"""

    def test_symbols_become_underscores(self):
        assert normalize_attribute_key("Custom-Field!") == "custom_field"

    def test_spaces_become_underscores(self):
        assert normalize_attribute_key("PDP URL") == "pdp_url"

    def test_repeated_underscores_collapse(self):
        assert normalize_attribute_key("  Weight (kg) __ net ") == "weight_kg_net"

    def test_only_symbols_yields_empty(self):
        assert normalize_attribute_key("!!!") == ""


class TestParseNumericString:
    """Tests for parse_numeric_string()"""

    def test_integer(self):
        result = parse_numeric_string("100")
        assert result == 100
        assert isinstance(result, int)

    def test_decimal(self):
        assert parse_numeric_string("29.99") == 29.99

    def test_thousands_separator(self):
        assert parse_numeric_string("1,299") == 1299

    def test_negative(self):
        assert parse_numeric_string("-5") == -5

    def test_currency_symbol_stripped(self):
        assert parse_numeric_string("$1,299.99") == 1299.99

    @pytest.mark.parametrize("value", ["https://x", "12 units", "1.2.3", "", "abc", ",", ",,", "-,"])
    def test_non_numeric_returns_none(self, value):
        assert parse_numeric_string(value) is None
