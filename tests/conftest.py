"""Shared fixtures: an in-memory Supabase client and a TestClient with auth overridden."""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from app.core.dependencies import get_current_user_id
from app.database.supabase_client import get_anon_supabase, get_supabase
from app.main import app

ADMIN_USER = {"id": "user-admin", "email": "admin@example.com", "app_metadata": {"type": "super_user"}}
VIEWER_USER = {"id": "user-viewer", "email": "viewer@example.com", "app_metadata": {}}


class FakeResponse:
    def __init__(self, data: Any, count: Optional[int] = None):
        self.data = data
        self.count = count


class FakeQuery:
    """Chainable subset of the postgrest query builder, evaluated against FakeSupabase.tables."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.operation = "select"
        self.payload: Any = None
        self.on_conflict: Optional[str] = None
        self.ignore_duplicates = False
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.order_by: List[tuple] = []
        self.limit_count: Optional[int] = None
        self.offset_count = 0
        self.single_row = False
        self.count: Optional[str] = None

    # Operations

    def select(self, columns: str = "*", count: Optional[str] = None) -> "FakeQuery":
        self.count = count
        return self

    def insert(self, rows: Any) -> "FakeQuery":
        self.operation = "insert"
        self.payload = rows
        return self

    def update(self, values: Dict[str, Any]) -> "FakeQuery":
        self.operation = "update"
        self.payload = values
        return self

    def upsert(self, rows: Any, on_conflict: str = "id", ignore_duplicates: bool = False) -> "FakeQuery":
        self.operation = "upsert"
        self.payload = rows
        self.on_conflict = on_conflict
        self.ignore_duplicates = ignore_duplicates
        return self

    def delete(self) -> "FakeQuery":
        self.operation = "delete"
        return self

    # Filters

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column: str, values: List[Any]) -> "FakeQuery":
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def gte(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) is not None and str(row[column]) >= str(value))
        return self

    def ilike(self, column: str, pattern: str) -> "FakeQuery":
        needle = pattern.strip("%").lower()
        self.filters.append(lambda row: needle in str(row.get(column) or "").lower())
        return self

    def or_(self, expression: str) -> "FakeQuery":
        clauses = []
        for part in expression.split(","):
            column, _, pattern = part.split(".", 2)
            clauses.append((column, pattern.strip("%").lower()))
        self.filters.append(
            lambda row: any(needle in str(row.get(column) or "").lower() for column, needle in clauses)
        )
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by.append((column, desc))
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.limit_count = count
        return self

    def offset(self, count: int) -> "FakeQuery":
        self.offset_count = count
        return self

    def single(self) -> "FakeQuery":
        self.single_row = True
        return self

    def maybe_single(self) -> "FakeQuery":
        return self.single()

    # Execution

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(check(row) for check in self.filters)

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table_name, self.operation))
        if self.table_name in self.db.failing_tables:
            raise APIError({"message": f"relation {self.table_name} is unavailable", "code": "XX000"})

        rows = self.db.tables.setdefault(self.table_name, [])
        handler = getattr(self, f"_execute_{self.operation}")
        return handler(rows)

    def _execute_select(self, rows: List[Dict[str, Any]]) -> FakeResponse:
        matched = [copy.deepcopy(row) for row in rows if self._matches(row)]
        for column, desc in reversed(self.order_by):
            matched.sort(key=lambda row: (row.get(column) is None, str(row.get(column) or "")), reverse=desc)
        total = len(matched)
        matched = matched[self.offset_count:]
        if self.limit_count is not None:
            matched = matched[:self.limit_count]
        if self.single_row:
            if len(matched) != 1:
                raise APIError({
                    "message": "JSON object requested, multiple (or no) rows returned",
                    "code": "PGRST116",
                    "details": f"The result contains {len(matched)} rows",
                    "hint": None,
                })
            return FakeResponse(matched[0], total if self.count else None)
        return FakeResponse(matched, total if self.count else None)

    def _new_row(self, values: Dict[str, Any]) -> Dict[str, Any]:
        row = copy.deepcopy(values)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        return row

    def _execute_insert(self, rows: List[Dict[str, Any]]) -> FakeResponse:
        payload = self.payload if isinstance(self.payload, list) else [self.payload]
        created = [self._new_row(values) for values in payload]
        for row in created:
            if any(existing.get("id") == row["id"] for existing in rows):
                raise APIError({"message": "duplicate key value violates unique constraint", "code": "23505"})
        rows.extend(created)
        return FakeResponse(copy.deepcopy(created))

    def _execute_update(self, rows: List[Dict[str, Any]]) -> FakeResponse:
        updated = []
        for row in rows:
            if self._matches(row):
                row.update(copy.deepcopy(self.payload))
                updated.append(copy.deepcopy(row))
        return FakeResponse(updated)

    def _execute_upsert(self, rows: List[Dict[str, Any]]) -> FakeResponse:
        payload = self.payload if isinstance(self.payload, list) else [self.payload]
        keys = [key.strip() for key in (self.on_conflict or "id").split(",")]
        result = []
        for values in payload:
            existing = next(
                (row for row in rows if all(k in values and row.get(k) == values[k] for k in keys)),
                None,
            )
            if existing is not None:
                if not self.ignore_duplicates:
                    existing.update(copy.deepcopy(values))
                result.append(copy.deepcopy(existing))
            else:
                row = self._new_row(values)
                rows.append(row)
                result.append(copy.deepcopy(row))
        return FakeResponse(result)

    def _execute_delete(self, rows: List[Dict[str, Any]]) -> FakeResponse:
        deleted = [row for row in rows if self._matches(row)]
        rows[:] = [row for row in rows if not self._matches(row)]
        return FakeResponse(copy.deepcopy(deleted))


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def upload(self, path: str, file: bytes, file_options: Optional[Dict[str, str]] = None):
        if self.storage.fail_uploads:
            raise RuntimeError("storage unavailable")
        self.storage.objects[(self.name, path)] = {"content": file, "options": file_options or {}}
        return {"path": path}

    def get_public_url(self, path: str) -> str:
        return f"https://storage.test/{self.name}/{path}"

    def remove(self, paths: List[str]):
        for path in paths:
            self.storage.objects.pop((self.name, path), None)
        return paths


class FakeStorage:
    def __init__(self):
        self.objects: Dict[tuple, Dict[str, Any]] = {}
        self.fail_uploads = False

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.failing_tables: set = set()
        self.calls: List[tuple] = []
        self.storage = FakeStorage()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def seed(self, table: str, *rows: Dict[str, Any]) -> List[Dict[str, Any]]:
        stored = self.tables.setdefault(table, [])
        for row in rows:
            stored.append(copy.deepcopy(row))
        return stored


@pytest.fixture
def db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def current_user() -> Dict[str, Any]:
    return copy.deepcopy(ADMIN_USER)


@pytest.fixture
def client(db: FakeSupabase, current_user: Dict[str, Any]):
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_anon_supabase] = lambda: db
    app.dependency_overrides[get_current_user_id] = lambda: current_user
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def viewer(db: FakeSupabase, current_user: Dict[str, Any]) -> Dict[str, Any]:
    """Switch the authenticated user to a profile with the viewer role."""
    current_user.clear()
    current_user.update(copy.deepcopy(VIEWER_USER))
    db.seed("profiles", {"id": "profile-viewer", "user_id": VIEWER_USER["id"], "role": "viewer"})
    return current_user
