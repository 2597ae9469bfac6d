"""
Pytest configuration.

- Adds the project root to the Python path so tests can import domain,
  repositories, services and api.
- Pins a test environment before anything reads Settings.
- Provides an in-memory stand-in for the Supabase client that understands the
  query-builder calls the repositories make, including the UNIQUE constraint on
  users.email (raised the way PostgREST reports it).
"""

from __future__ import annotations

import os
import sys
import threading
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
from postgrest.exceptions import APIError

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

os.environ.update(
    {
        "JWT_SECRET": "test-signing-secret-with-enough-length-for-hs256",
        "JWT_EXPIRE": "1h",
        "JWT_COOKIE_EXPIRE": "1",
        "CLIENT_URL": "http://frontend.test",
        "BACKEND_URL": "http://api.test",
        "GOOGLE_CLIENT_ID": "google-client",
        "GOOGLE_CLIENT_SECRET": "google-secret",
        "GITHUB_CLIENT_ID": "github-client",
        "GITHUB_CLIENT_SECRET": "github-secret",
        "SUPABASE_URL": "https://test.supabase.co",
        "SUPABASE_KEY": "test-key",
        "ENVIRONMENT": "test",
    }
)

from domain.lead import Lead  # noqa: E402
from domain.principal import OAuthProvider, Principal, Role  # noqa: E402
from repositories import client as supabase_client  # noqa: E402
from repositories.lead_repository import insert_lead  # noqa: E402
from repositories.user_repository import insert_user  # noqa: E402
from services import password_hasher  # noqa: E402
from services.token_service import get_token_issuer  # noqa: E402


# ============================================================================
# In-memory Supabase
# ============================================================================

class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]], count: Optional[int] = None) -> None:
        self.data = data
        self.count = count


class FakeQuery:
    """Records a chained PostgREST query and runs it against FakeSupabase."""

    def __init__(self, store: "FakeSupabase", table: str) -> None:
        self._store = store
        self.table = table
        self.op = "select"
        self.payload: Any = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.order_by: Optional[tuple[str, bool]] = None
        self.row_limit: Optional[int] = None
        self.count: Optional[str] = None

    def select(self, *columns: str, count: Optional[str] = None) -> "FakeQuery":
        self.op = "select"
        self.count = count
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload: Dict[str, Any]) -> "FakeQuery":
        self.op = "update"
        self.payload = payload
        return self

    def delete(self) -> "FakeQuery":
        self.op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column: str, values: List[Any]) -> "FakeQuery":
        allowed = set(values)
        self.filters.append(lambda row: row.get(column) in allowed)
        return self

    def gte(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) is not None and row[column] >= value)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    def limit(self, size: int) -> "FakeQuery":
        self.row_limit = size
        return self

    def execute(self) -> FakeResponse:
        return self._store.run(self)


class FakeSupabase:
    UNIQUE_COLUMNS = {"users": ("email",)}

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self._lock = threading.Lock()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def run(self, query: FakeQuery) -> FakeResponse:
        with self._lock:
            rows = self.tables[query.table]

            if query.op == "insert":
                payloads = query.payload if isinstance(query.payload, list) else [query.payload]
                for payload in payloads:
                    for column in self.UNIQUE_COLUMNS.get(query.table, ()):
                        if any(row.get(column) == payload.get(column) for row in rows):
                            raise APIError(
                                {
                                    "code": "23505",
                                    "message": f"duplicate key value violates unique constraint on {column}",
                                    "details": None,
                                    "hint": None,
                                }
                            )
                    rows.append(dict(payload))
                return FakeResponse([dict(p) for p in payloads])

            matched = [row for row in rows if all(f(row) for f in query.filters)]

            if query.op == "update":
                for row in matched:
                    row.update(query.payload)
                return FakeResponse([dict(row) for row in matched])

            if query.op == "delete":
                self.tables[query.table] = [row for row in rows if row not in matched]
                return FakeResponse([dict(row) for row in matched])

            if query.order_by is not None:
                column, desc = query.order_by
                matched = sorted(
                    matched,
                    key=lambda row: (row.get(column) is not None, row.get(column) or ""),
                    reverse=desc,
                )
            total = len(matched)
            if query.row_limit is not None:
                matched = matched[: query.row_limit]
            count = total if query.count else None
            return FakeResponse([dict(row) for row in matched], count=count)


@pytest.fixture()
def fake_store(monkeypatch: pytest.MonkeyPatch) -> FakeSupabase:
    store = FakeSupabase()
    monkeypatch.setattr(supabase_client, "get_supabase", lambda: store)
    return store


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(password_hasher, "BCRYPT_ROUNDS", 4)


# ============================================================================
# Factories
# ============================================================================

def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture()
def make_principal(fake_store: FakeSupabase) -> Callable[..., Principal]:
    def _make(
        role: Role = Role.TELECALLER,
        email: Optional[str] = None,
        name: str = "Test User",
        password: str = "correct-horse",
        oauth_provider: Optional[OAuthProvider] = None,
    ) -> Principal:
        principal = Principal(
            id=uuid.uuid4(),
            name=name,
            email=email or f"{uuid.uuid4().hex[:8]}@example.com",
            role=role,
            created_at=datetime.now(timezone.utc),
            password_hash=None if oauth_provider else password_hasher.hash_password(password),
            oauth_provider=oauth_provider,
            oauth_id="ext-1" if oauth_provider else None,
        )
        insert_user(principal)
        return principal

    return _make


@pytest.fixture()
def make_lead(fake_store: FakeSupabase) -> Callable[..., Lead]:
    def _make(owner: Principal, **overrides: Any) -> Lead:
        fields: Dict[str, Any] = {
            "id": uuid.uuid4(),
            "name": "Ravi Kumar",
            "email": "ravi@example.com",
            "phone": "+91 98450 00000",
            "address": "12 MG Road",
            "telecaller": owner.id,
            "created_at": datetime.now(timezone.utc),
        }
        fields.update(overrides)
        lead = Lead(**fields)
        insert_lead(lead)
        return lead

    return _make


def bearer(principal: Principal) -> Dict[str, str]:
    return {"Authorization": f"Bearer {get_token_issuer().issue(principal)}"}
