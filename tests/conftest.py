"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Required settings for anything that loads config
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from copy import deepcopy
from itertools import count
from typing import Generator
from unittest.mock import patch

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """
    Chainable query over an in-memory table.

    Filters (eq, is_, in_), ordering, limit and range are honoured, and writes
    change the shared rows, so services see their own inserts.
    """

    def __init__(self, table: "MockSupabaseTable"):
        self._table = table
        self._filters = []
        self._order = None
        self._limit = None
        self._range = None
        self._action = "select"
        self._payload = None
        self._columns = "*"

    # Actions
    def select(self, columns: str = "*", **kwargs):
        self._action = "select"
        self._columns = columns
        return self

    def insert(self, data):
        self._action = "insert"
        self._payload = data
        return self

    def update(self, data):
        self._action = "update"
        self._payload = data
        return self

    def delete(self):
        self._action = "delete"
        return self

    # Filters
    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def is_(self, column, value):
        self._filters.append(lambda row: row.get(column) is None)
        return self

    def in_(self, column, values):
        values = list(values)
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self._order = (column, desc)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def _matches(self, row: dict) -> bool:
        return all(check(row) for check in self._filters)

    def _project(self, row: dict) -> dict:
        if self._columns.strip() == "*":
            return deepcopy(row)
        columns = [c.strip() for c in self._columns.split(",")]
        return {c: deepcopy(row.get(c)) for c in columns}

    def execute(self) -> MockSupabaseResponse:
        self._table.calls.append(self._action)

        if self._table.fail_on == self._action:
            raise RuntimeError(f"simulated {self._action} failure")

        rows = self._table.rows

        if self._action == "insert":
            items = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = []
            for item in items:
                row = deepcopy(item)
                row.setdefault("id", f"rec-{next(self._table.ids)}")
                rows.append(row)
                inserted.append(deepcopy(row))
            return MockSupabaseResponse(data=inserted)

        if self._action == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(deepcopy(self._payload))
                    updated.append(deepcopy(row))
            return MockSupabaseResponse(data=updated)

        if self._action == "delete":
            deleted = [row for row in rows if self._matches(row)]
            self._table.rows[:] = [row for row in rows if not self._matches(row)]
            return MockSupabaseResponse(data=deepcopy(deleted))

        selected = [row for row in rows if self._matches(row)]
        if self._order:
            column, desc = self._order
            selected.sort(key=lambda row: row.get(column) or "", reverse=desc)
        if self._limit is not None:
            selected = selected[:self._limit]
        if self._range is not None:
            start, end = self._range
            selected = selected[start:end + 1]
        return MockSupabaseResponse(data=[self._project(row) for row in selected])


class MockSupabaseTable:
    """In-memory table shared by every query against it."""

    def __init__(self, rows: list = None):
        self.rows = deepcopy(rows or [])
        self.ids = count(1)
        self.calls = []
        self.fail_on = None

    def _query(self) -> MockSupabaseQuery:
        return MockSupabaseQuery(self)

    def select(self, *args, **kwargs):
        return self._query().select(*args, **kwargs)

    def insert(self, data):
        return self._query().insert(data)

    def update(self, data):
        return self._query().update(data)

    def delete(self):
        return self._query().delete()

    @property
    def writes(self) -> list:
        return [c for c in self.calls if c in ("insert", "update", "delete")]


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}

    def set_table_data(self, table_name: str, data: list):
        """Configure initial rows for a table."""
        self._tables[table_name] = MockSupabaseTable(data)

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table (created empty on first use)."""
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable()
        return self._tables[name]


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("products", [
                {"id": "1", "org_id": "acme", "sku": "TEST", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the client factories so services built without an explicit
    client get the mock.
    """
    with patch("services.product_store.get_write_client", return_value=mock_supabase):
        with patch("services.mapping_rule_service.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture
def products_table(mock_supabase) -> MockSupabaseTable:
    """The products table of the mock client."""
    return mock_supabase.table("products")


@pytest.fixture
def store(mock_supabase):
    """ProductStore backed by the mock client."""
    from services.product_store import ProductStore
    return ProductStore(client=mock_supabase)


@pytest.fixture
def upsert_service(store):
    """UpsertService backed by the mock client."""
    from services.upsert_service import UpsertService
    return UpsertService(store=store)


@pytest.fixture
def widget_row() -> dict:
    """Typical spreadsheet row using default headers."""
    return {
        "Product Name": "Widget Pro",
        "MSRP": "29.99",
        "SKU": "WID-001",
        "Images": "img1.jpg|img2.jpg",
        "Custom Field": "Special Value",
    }
