"""
Shared test fixtures.

Cutoff and ranking tests run against the in-memory stores; the
Supabase-backed stores are exercised through MockSupabaseClient.
"""

import sys
from pathlib import Path

# Add project root to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from unittest.mock import patch
from datetime import datetime, timezone
from typing import Generator

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

    def __init__(self, data: list = None, count: int = None):
        self._data = data or []
        self._count = count

    def select(self, *args, **kwargs):
        return self

    def upsert(self, data, **kwargs):
        # Simulate upsert - echo rows back as stored
        if isinstance(data, dict):
            data = [data]
        self._data = [dict(row) for row in data]
        return self

    def eq(self, column, value):
        self._data = [row for row in self._data if row.get(column, value) == value]
        return self

    def order(self, column, **kwargs):
        return self

    def execute(self) -> MockSupabaseResponse:
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, name: str, data: list = None, count: int = None, calls: list = None):
        self._name = name
        self._data = data or []
        self._count = count
        self._calls = calls if calls is not None else []

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._data.copy(), self._count)

    def upsert(self, data, **kwargs):
        self._calls.append({"table": self._name, "op": "upsert", "data": data, **kwargs})
        query = MockSupabaseQuery(self._data.copy(), self._count)
        return query.upsert(data)


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}
        self.calls = []

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count}

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None})
        return MockSupabaseTable(name, config["data"], config["count"], self.calls)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("location_cutoff_rules", [
                {"location_id": "loc-1", "timezone": "America/Detroit", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("branches", [...])
            # Now any store built from get_supabase_client() gets the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.cutoff_rule_store.get_supabase_client", return_value=mock_supabase):
            with patch("services.branch_facts_service.get_supabase_client", return_value=mock_supabase):
                yield mock_supabase


@pytest.fixture(autouse=True)
def reset_service_singletons():
    """Give every test fresh in-memory stores."""
    import services.cutoff_rules_service as rules_module
    import services.cutoff_service as cutoff_module
    import services.fulfillment_service as fulfillment_module

    rules_module._cutoff_rules_service = None
    cutoff_module._cutoff_service = None
    fulfillment_module._fulfillment_service = None
    yield
    rules_module._cutoff_rules_service = None
    cutoff_module._cutoff_service = None
    fulfillment_module._fulfillment_service = None


# ===================
# FIXED INSTANTS
# ===================
# 2026-06-17 is a Wednesday; Detroit is on EDT (UTC-4).

@pytest.fixture
def wednesday_2pm_detroit() -> datetime:
    """14:00 local in Detroit on a weekday."""
    return datetime(2026, 6, 17, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def wednesday_3pm_detroit() -> datetime:
    """15:00 local in Detroit on a weekday."""
    return datetime(2026, 6, 17, 19, 0, tzinfo=timezone.utc)


@pytest.fixture
def saturday_2pm_detroit() -> datetime:
    """14:00 local in Detroit on a Saturday."""
    return datetime(2026, 6, 20, 18, 0, tzinfo=timezone.utc)


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/cutoff-rules")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
