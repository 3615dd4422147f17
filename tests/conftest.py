"""
Shared fixtures: an in-memory stand-in for the Supabase client and a TestClient
wired to it through dependency overrides.

FakeSupabase implements the slice of the postgrest query builder the services use
(select / insert / update / delete / upsert with eq, neq, in_, ilike, or_, order,
limit, single, maybe_single), named RPCs, and a storage bucket.
"""

import copy
import re
import uuid

import pytest
from fastapi.testclient import TestClient

from project_partner.main import app
from project_partner.database.supabase_client import get_supabase, get_service_supabase
from project_partner.core.dependencies import get_current_user_id
from project_partner.modules.project_runs import service as project_runs_service


class FakeResult:
    def __init__(self, data):
        self.data = data


class FakeAPIError(Exception):
    """Mimics postgrest.APIError, which exposes the Postgres error code."""

    def __init__(self, message, code=None):
        super().__init__(message)
        self.code = code


def _like_to_regex(pattern):
    parts = [re.escape(p) for p in str(pattern).split("%")]
    return re.compile("^" + ".*".join(parts) + "$", re.IGNORECASE | re.DOTALL)


def _condition(column, op, value):
    if op == "eq":
        return lambda row: str(row.get(column)) == str(value)
    if op == "neq":
        return lambda row: str(row.get(column)) != str(value)
    if op == "ilike":
        regex = _like_to_regex(value)
        return lambda row: row.get(column) is not None and bool(regex.match(str(row.get(column))))
    raise NotImplementedError(op)


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table_name = table
        self.action = "select"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.ordering = []
        self.row_limit = None
        self.single_mode = None

    # actions

    def select(self, columns="*"):
        self.action = "select"
        return self

    def insert(self, payload):
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.action = "update"
        self.payload = payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    def upsert(self, payload, on_conflict=None):
        self.action = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    # filters

    def eq(self, column, value):
        self.filters.append(_condition(column, "eq", value))
        return self

    def neq(self, column, value):
        self.filters.append(_condition(column, "neq", value))
        return self

    def in_(self, column, values):
        allowed = {str(v) for v in values}
        self.filters.append(lambda row: str(row.get(column)) in allowed)
        return self

    def ilike(self, column, pattern):
        self.filters.append(_condition(column, "ilike", pattern))
        return self

    def or_(self, expression):
        conditions = []
        for part in expression.split(","):
            column, op, value = part.split(".", 2)
            conditions.append(_condition(column, op, value))
        self.filters.append(lambda row: any(c(row) for c in conditions))
        return self

    def order(self, column, desc=False):
        self.ordering.append((column, desc))
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def single(self):
        self.single_mode = "single"
        return self

    def maybe_single(self):
        self.single_mode = "maybe_single"
        return self

    # execution

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def execute(self):
        self.db.calls.append((self.table_name, self.action))
        failure = self.db.failures.get((self.table_name, self.action))
        if failure is not None:
            raise failure

        rows = self.db.tables.setdefault(self.table_name, [])
        if self.action == "select":
            return self._select(rows)
        if self.action == "insert":
            return FakeResult(self._insert(rows, self.payload))
        if self.action == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self.payload))
                    updated.append(copy.deepcopy(row))
            return FakeResult(updated)
        if self.action == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.db.tables[self.table_name] = [r for r in rows if not self._matches(r)]
            return FakeResult(copy.deepcopy(removed))
        if self.action == "upsert":
            return FakeResult(self._upsert(rows))
        raise NotImplementedError(self.action)

    def _select(self, rows):
        selected = [copy.deepcopy(r) for r in rows if self._matches(r)]
        for column, desc in reversed(self.ordering):
            selected.sort(key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)
        if self.row_limit is not None:
            selected = selected[:self.row_limit]
        if self.single_mode == "single":
            if len(selected) != 1:
                raise FakeAPIError("JSON object requested, multiple (or no) rows returned", code="PGRST116")
            return FakeResult(selected[0])
        if self.single_mode == "maybe_single":
            return FakeResult(selected[0]) if selected else None
        return FakeResult(selected)

    def _insert(self, rows, payload):
        items = payload if isinstance(payload, list) else [payload]
        created = []
        for item in items:
            row = copy.deepcopy(item)
            row.setdefault("id", str(uuid.uuid4()))
            rows.append(row)
            created.append(copy.deepcopy(row))
        return created

    def _upsert(self, rows):
        key = self.on_conflict or "id"
        existing = next((r for r in rows if r.get(key) == self.payload.get(key)), None)
        if existing is None:
            return self._insert(rows, self.payload)
        existing.update(copy.deepcopy(self.payload))
        return [copy.deepcopy(existing)]


class FakeRPC:
    def __init__(self, db, name, params):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.rpc_calls.append((self.name, self.params))
        handler = self.db.rpc_handlers.get(self.name)
        if handler is None:
            return FakeResult(None)
        return FakeResult(handler(self.params))


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, content, file_options=None):
        if self.storage.fail_uploads:
            raise Exception("storage unavailable")
        self.storage.objects[(self.name, path)] = content
        return {"path": path}

    def remove(self, paths):
        for path in paths:
            self.storage.objects.pop((self.name, path), None)
            self.storage.removed.append(path)
        return []

    def create_signed_url(self, path, expires_in):
        return {"signedURL": f"https://storage.test/{self.name}/{path}?expires={expires_in}"}


class FakeStorage:
    def __init__(self):
        self.objects = {}
        self.removed = []
        self.fail_uploads = False

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.failures = {}
        self.calls = []
        self.rpc_handlers = {}
        self.rpc_calls = []
        self.storage = FakeStorage()

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        return FakeRPC(self, name, params or {})

    # helpers for tests

    def seed(self, table, *rows):
        for row in rows:
            self.tables.setdefault(table, []).append(copy.deepcopy(row))

    def rows(self, table):
        return self.tables.get(table, [])

    def fail(self, table, action, error=None):
        self.failures[(table, action)] = error or Exception(f"{table} {action} failed")


USER = {"id": "user-1", "email": "diy@example.com", "user_metadata": {}, "app_metadata": {}}
ADMIN = {"id": "admin-1", "email": "admin@example.com", "user_metadata": {}, "app_metadata": {"type": "super_user"}}


def make_phases(*step_counts, prefix="phase"):
    """Phase tree with one operation per phase and the given number of steps in each."""
    phases = []
    for p, count in enumerate(step_counts):
        steps = [{"id": f"{prefix}-{p}-step-{s}", "step": f"Step {s}"} for s in range(count)]
        phases.append({
            "id": f"{prefix}-{p}",
            "name": f"Phase {p}",
            "operations": [{"id": f"{prefix}-{p}-op", "name": "Operation", "steps": steps}],
        })
    return phases


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture(autouse=True)
def reset_update_keys():
    project_runs_service._last_update_keys.clear()
    yield
    project_runs_service._last_update_keys.clear()


def _client_for(supabase, user):
    app.dependency_overrides[get_supabase] = lambda: supabase
    app.dependency_overrides[get_service_supabase] = lambda: supabase
    app.dependency_overrides[get_current_user_id] = lambda: user
    return TestClient(app)


@pytest.fixture
def user_client(supabase):
    client = _client_for(supabase, USER)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(supabase):
    client = _client_for(supabase, ADMIN)
    yield client
    app.dependency_overrides.clear()
