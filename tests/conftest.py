"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from datetime import date

from tests.factories import SkuFactory, CartFactory

# Frozen reference date for default ATS windows
TODAY = date(2025, 5, 15)

SUMMER = {
    "collection_id": 10,
    "collection_name": "Summer",
    "ship_window_start": date(2025, 6, 1),
    "ship_window_end": date(2025, 6, 30),
}
FALL = {
    "collection_id": 20,
    "collection_name": "Fall",
    "ship_window_start": date(2025, 6, 15),
    "ship_window_end": date(2025, 7, 31),
}
HOLIDAY = {
    "collection_id": 30,
    "collection_name": "Holiday",
    "ship_window_start": date(2025, 10, 1),
    "ship_window_end": date(2025, 11, 15),
}


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, data: list = None, count: int = None, error: Exception = None):
        self._data = data or []
        self._count = count
        self._error = error

    def select(self, *args, **kwargs):
        return self

    def eq(self, column, value):
        return self

    def in_(self, column, values):
        return self

    def order(self, column, **kwargs):
        return self

    def limit(self, count):
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._error is not None:
            raise self._error
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, data: list = None, count: int = None, error: Exception = None):
        self._data = data or []
        self._count = count
        self._error = error

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._data.copy(), self._count, self._error)


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count, "error": None}

    def set_table_error(self, table_name: str, error: Exception):
        """Make every query on a table raise."""
        self._tables[table_name] = {"data": [], "count": None, "error": error}

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None, "error": None})
        return MockSupabaseTable(config["data"], config["count"], config["error"])


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("planned_shipments", [...])
    """
    return MockSupabaseClient()


@pytest.fixture
def today() -> date:
    """Frozen reference date."""
    return TODAY


@pytest.fixture
def summer_cart():
    """
    Two Summer SKUs plus one ATS SKU.

    Usage:
        def test_something(summer_cart):
            items = build_cart_items(summer_cart)
    """
    return CartFactory.create(
        lines=[
            ("prod-1", "SUM-RED-S", 2, SkuFactory.create(sku_variant_id=101, **SUMMER)),
            ("prod-1", "SUM-RED-M", 3, SkuFactory.create(sku_variant_id=102, **SUMMER)),
            ("prod-2", "ATS-TEE-L", 1, SkuFactory.create(sku_variant_id=201)),
        ]
    )


@pytest.fixture
def three_collection_cart():
    """Summer, Fall (overlapping Summer) and Holiday (disjoint) plus ATS."""
    return CartFactory.create(
        lines=[
            ("prod-1", "SUM-1", 1, SkuFactory.create(sku_variant_id=1, **SUMMER)),
            ("prod-2", "FALL-1", 2, SkuFactory.create(sku_variant_id=2, **FALL)),
            ("prod-3", "HOL-1", 3, SkuFactory.create(sku_variant_id=3, **HOLIDAY)),
            ("prod-4", "ATS-1", 4, SkuFactory.create(sku_variant_id=4)),
        ]
    )


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.post("/api/shipment-plans/preview", json={...})
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
