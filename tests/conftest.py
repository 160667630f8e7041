# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - FakeSupabase: an in-memory stand-in for the supabase-py query builder
# - An authenticated TestClient wired to the fake database
# =============================================================================

import os
import re
import uuid
from copy import deepcopy
from typing import Any

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length-for-hs256")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

TEST_USER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_USER_ID = "22222222-2222-2222-2222-222222222222"


# =============================================================================
# In-memory Supabase
# =============================================================================

class FakeResponse:
    def __init__(self, data: Any, count: int | None = None):
        self.data = data
        self.count = count


def _same(actual: Any, expected: Any) -> bool:
    if actual == expected:
        return True
    if isinstance(actual, bool) or isinstance(expected, bool):
        return str(actual).lower() == str(expected).lower()
    return actual is not None and str(actual) == str(expected)


def _like(actual: Any, pattern: str) -> bool:
    if actual is None:
        return False
    regex = ".*".join(re.escape(part) for part in pattern.split("%"))
    return re.fullmatch(regex, str(actual), flags=re.IGNORECASE | re.DOTALL) is not None


def _compare(actual: Any, expected: Any, op) -> bool:
    if actual is None:
        return False
    if isinstance(actual, (int, float)) and not isinstance(actual, bool):
        try:
            return op(actual, float(expected))
        except (TypeError, ValueError):
            return False
    return op(str(actual), str(expected))


def _split_conditions(expression: str) -> list[str]:
    """Split an or=() filter on commas that aren't inside parentheses."""
    parts, depth, current = [], 0, ""
    for char in expression:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if char == "," and depth == 0:
            parts.append(current)
            current = ""
        else:
            current += char
    if current:
        parts.append(current)
    return parts


def _condition(part: str):
    column, operator, value = part.split(".", 2)
    if operator == "ilike":
        return lambda row: _like(row.get(column), value)
    if operator == "eq":
        return lambda row: _same(row.get(column), value)
    if operator == "in":
        values = [item.strip() for item in value.strip("()").split(",") if item.strip()]
        return lambda row: any(_same(row.get(column), item) for item in values)
    raise ValueError(f"Unsupported or_ operator: {operator}")


class FakeQuery:
    """Chainable query over one in-memory table."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.operation = "select"
        self.payload: Any = None
        self.filters: list = []
        self.orders: list[tuple[str, bool]] = []
        self.window: tuple[int, int] | None = None
        self.max_rows: int | None = None
        self.want_single = False
        self.want_count = False

    # -- operations -----------------------------------------------------------

    def select(self, columns: str = "*", count: str | None = None):
        self.operation = "select"
        self.want_count = count is not None
        return self

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self

    def delete(self):
        self.operation = "delete"
        return self

    # -- filters --------------------------------------------------------------

    def eq(self, column, value):
        self.filters.append(lambda row: _same(row.get(column), value))
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: not _same(row.get(column), value))
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: _compare(row.get(column), value, lambda a, b: a >= b))
        return self

    def lte(self, column, value):
        self.filters.append(lambda row: _compare(row.get(column), value, lambda a, b: a <= b))
        return self

    def gt(self, column, value):
        self.filters.append(lambda row: _compare(row.get(column), value, lambda a, b: a > b))
        return self

    def lt(self, column, value):
        self.filters.append(lambda row: _compare(row.get(column), value, lambda a, b: a < b))
        return self

    def ilike(self, column, pattern):
        self.filters.append(lambda row: _like(row.get(column), pattern))
        return self

    def in_(self, column, values):
        self.filters.append(lambda row: any(_same(row.get(column), value) for value in values))
        return self

    def or_(self, expression):
        conditions = [_condition(part) for part in _split_conditions(expression)]
        self.filters.append(lambda row: any(condition(row) for condition in conditions))
        return self

    # -- shaping --------------------------------------------------------------

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def range(self, start, end):
        self.window = (start, end)
        return self

    def limit(self, count):
        self.max_rows = count
        return self

    def single(self):
        self.want_single = True
        return self

    # -- execution ------------------------------------------------------------

    def _matches(self, row) -> bool:
        return all(condition(row) for condition in self.filters)

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table_name, self.operation))
        if self.table_name in self.db.failing_tables:
            raise Exception(f"relation \"{self.table_name}\" is unavailable")

        rows = self.db.tables.setdefault(self.table_name, [])

        if self.operation == "insert":
            return FakeResponse(self.db.insert_rows(self.table_name, self.payload))

        if self.operation == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(deepcopy(self.payload))
                    updated.append(deepcopy(row))
            return FakeResponse(updated)

        if self.operation == "delete":
            removed = [row for row in rows if self._matches(row)]
            self.db.tables[self.table_name] = [row for row in rows if not self._matches(row)]
            return FakeResponse(deepcopy(removed))

        matched = [deepcopy(row) for row in rows if self._matches(row)]
        total = len(matched)

        for column, descending in reversed(self.orders):
            present = [row for row in matched if row.get(column) is not None]
            missing = [row for row in matched if row.get(column) is None]
            present.sort(key=lambda row: row[column], reverse=descending)
            matched = present + missing

        if self.window is not None:
            start, end = self.window
            matched = matched[start:end + 1]
        if self.max_rows is not None:
            matched = matched[:self.max_rows]

        if self.want_single:
            if len(matched) != 1:
                raise Exception(
                    "{'code': 'PGRST116', 'message': 'JSON object requested, multiple (or no) rows returned'}"
                )
            return FakeResponse(matched[0], total if self.want_count else None)

        return FakeResponse(matched, total if self.want_count else None)


class FakeSupabase:
    """
    In-memory replacement for the supabase Client.

    Tables are plain lists of dicts. Embedded selects are not resolved, so
    tests store related rows pre-embedded (e.g. "vehicle_makes": {"name": ...}).
    """

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.unique: dict[str, tuple[str, ...]] = {}
        self.failing_tables: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def seed(self, table: str, *rows: dict[str, Any]) -> list[dict[str, Any]]:
        """Add rows (ids generated when absent) and return them."""
        return self.insert_rows(table, list(rows))

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.get(table, [])

    def insert_rows(self, table: str, payload) -> list[dict[str, Any]]:
        items = payload if isinstance(payload, list) else [payload]
        stored = self.tables.setdefault(table, [])
        inserted = []
        for item in items:
            row = deepcopy(item)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", f"2026-01-01T00:00:{len(stored):02d}+00:00")
            for column in self.unique.get(table, ()):
                if any(_same(existing.get(column), row.get(column)) for existing in stored):
                    raise Exception(
                        f"{{'code': '23505', 'message': 'duplicate key value violates unique constraint on {column}'}}"
                    )
            stored.append(row)
            inserted.append(deepcopy(row))
        return inserted


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_db(monkeypatch):
    """Route every SupabaseClient call to a fresh in-memory database."""
    from lib.supabase_client import SupabaseClient

    db = FakeSupabase()
    monkeypatch.setattr(SupabaseClient, "_instance", db)
    return db


@pytest.fixture
def user_id():
    return TEST_USER_ID


@pytest.fixture
def client(fake_db):
    """TestClient authenticated as TEST_USER_ID."""
    from fastapi.testclient import TestClient

    from app.auth import AuthUser, get_current_user
    from app.main import app

    app.dependency_overrides[get_current_user] = lambda: AuthUser(
        id=uuid.UUID(TEST_USER_ID),
        email="agent@rentaldesk.test",
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(fake_db):
    """TestClient with no auth override."""
    from fastapi.testclient import TestClient

    from app.main import app

    with TestClient(app) as test_client:
        yield test_client
