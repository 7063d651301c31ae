"""Shared fixtures for API tests: an in-memory stand-in for the Supabase client."""

import itertools
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from apps.api.core.auth import get_user_client
from apps.api.main import app

TEST_USER_ID = "user-1"


class FakeQuery:
    """Chainable PostgREST-style query over a list of dict rows."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.action = "select"
        self.payload = None
        self.filters: list[tuple[str, object]] = []
        self.ordering: tuple[str, bool] | None = None
        self.single = False

    def select(self, _columns: str = "*"):
        self.action = "select"
        return self

    def insert(self, rows):
        self.action = "insert"
        self.payload = rows
        return self

    def update(self, values: dict):
        self.action = "update"
        self.payload = values
        return self

    def eq(self, column: str, value):
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False):
        self.ordering = (column, desc)
        return self

    def maybe_single(self):
        self.single = True
        return self

    def _matches(self, row: dict) -> bool:
        return all(row.get(col) == value for col, value in self.filters)

    def execute(self):
        error = self.db.failures.get((self.table, self.action))
        if error is not None:
            raise error

        rows = self.db.tables.setdefault(self.table, [])

        if self.action == "insert":
            new_rows = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for row in new_rows:
                stored = dict(row)
                stored.setdefault("id", f"{self.table}-{next(self.db.ids)}")
                rows.append(stored)
                inserted.append(dict(stored))
            self.db.calls.append((self.table, "insert", len(inserted)))
            return SimpleNamespace(data=inserted)

        if self.action == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(dict(row))
            self.db.calls.append((self.table, "update", len(updated)))
            return SimpleNamespace(data=updated)

        selected = [dict(row) for row in rows if self._matches(row)]
        if self.ordering:
            column, desc = self.ordering
            selected.sort(key=lambda r: r.get(column) or "", reverse=desc)
        if self.single:
            return SimpleNamespace(data=selected[0] if selected else None)
        return SimpleNamespace(data=selected)


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        if self.name not in self.storage.buckets or self.storage.fail_uploads:
            raise RuntimeError(f"Bucket not found: {self.name}")
        self.storage.files[(self.name, path)] = file
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://storage.test/{self.name}/{path}"


class FakeStorage:
    def __init__(self, buckets=()):
        self.buckets = set(buckets)
        self.files: dict[tuple[str, str], bytes] = {}
        self.fail_uploads = False
        self.fail_create_bucket = False

    def from_(self, name: str) -> FakeBucket:
        return FakeBucket(self, name)

    def create_bucket(self, name, options=None):
        if self.fail_create_bucket:
            raise RuntimeError("not allowed to create buckets")
        self.buckets.add(name)
        return {"name": name}


class FakeSupabase:
    """Just enough of supabase.Client for the routers and services."""

    def __init__(self, user_id: str | None = TEST_USER_ID):
        self.tables: dict[str, list[dict]] = {}
        self.failures: dict[tuple[str, str], Exception] = {}
        self.calls: list[tuple[str, str, int]] = []
        self.ids = itertools.count(1)
        self.storage = FakeStorage(buckets={"bank-statements"})
        user = SimpleNamespace(id=user_id, email="owner@example.com") if user_id else None
        self.auth = SimpleNamespace(get_user=lambda: SimpleNamespace(user=user))

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def fail(self, table: str, action: str, message: str = "database unavailable"):
        self.failures[(table, action)] = RuntimeError(message)


@pytest.fixture
def fake_supabase():
    db = FakeSupabase()
    db.tables["users"] = [{"id": TEST_USER_ID, "role": "management"}]
    return db


@pytest.fixture
def api_client(fake_supabase):
    app.dependency_overrides[get_user_client] = lambda: fake_supabase
    yield TestClient(app)
    app.dependency_overrides.clear()
