"""
Pytest configuration and fixtures.

Supabase is replaced by FakeSupabase: an in-memory stand-in exposing the
subset of the supabase-py client the gateway uses (auth + table query
builder). Backend errors are raised the way supabase-py raises them, as
exceptions carrying a ``message`` attribute.
"""
from __future__ import annotations

import copy
import itertools
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Tuple

import pytest

from portfolio_gateway.config.config_manager import GatewayConfig
from portfolio_gateway.gateway import ProfileDataGateway
from portfolio_gateway.services.session_service import SessionService


class FakeAPIError(Exception):
    """Mimics postgrest.APIError / AuthApiError: message lives on ``.message``."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FakeQuery:
    def __init__(self, backend: "FakeSupabase", table: str) -> None:
        self._backend = backend
        self._table = table
        self._op = "select"
        self._columns = "*"
        self._payload: Any = None
        self._filters: List[Tuple[str, Any]] = []
        self._order: Optional[Tuple[str, bool]] = None
        self._limit: Optional[int] = None

    def select(self, columns: str = "*") -> "FakeQuery":
        # insert(...).select() keeps the insert
        if self._op == "select":
            self._columns = columns
        return self

    def insert(self, rows: Any) -> "FakeQuery":
        self._op = "insert"
        self._payload = rows if isinstance(rows, list) else [rows]
        return self

    def update(self, fields: Dict[str, Any]) -> "FakeQuery":
        self._op = "update"
        self._payload = fields
        return self

    def delete(self) -> "FakeQuery":
        self._op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._order = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self._limit = count
        return self

    def execute(self) -> SimpleNamespace:
        self._backend.calls.append((self._table, self._op))
        failure = self._backend.failures.get((self._table, self._op))
        if failure:
            raise FakeAPIError(failure)
        handler = getattr(self, f"_run_{self._op}")
        return SimpleNamespace(data=handler())

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(row.get(column) == value for column, value in self._filters)

    def _rows(self) -> List[Dict[str, Any]]:
        return self._backend.tables.setdefault(self._table, [])

    def _run_select(self) -> List[Dict[str, Any]]:
        rows = [row for row in self._rows() if self._matches(row)]
        if self._order:
            column, desc = self._order
            # PostgREST default: NULLS LAST ascending, NULLS FIRST descending
            rows.sort(key=lambda row: (row.get(column) is None, row.get(column) or ""), reverse=desc)
        if self._limit is not None:
            rows = rows[: self._limit]
        if self._columns.strip() != "*":
            wanted = [name.strip() for name in self._columns.split(",")]
            rows = [{name: row.get(name) for name in wanted} for row in rows]
        return copy.deepcopy(rows)

    def _run_insert(self) -> List[Dict[str, Any]]:
        inserted = []
        for row in self._payload:
            stored = {"id": next(self._backend.ids), **row}
            self._rows().append(stored)
            inserted.append(copy.deepcopy(stored))
        return inserted

    def _run_update(self) -> List[Dict[str, Any]]:
        updated = []
        for row in self._rows():
            if self._matches(row):
                row.update(self._payload)
                updated.append(copy.deepcopy(row))
        return updated

    def _run_delete(self) -> List[Dict[str, Any]]:
        kept, removed = [], []
        for row in self._rows():
            (removed if self._matches(row) else kept).append(row)
        self._backend.tables[self._table] = kept
        return copy.deepcopy(removed)


class FakeAuth:
    def __init__(self, backend: "FakeSupabase") -> None:
        self._backend = backend
        self.users: Dict[str, Dict[str, str]] = {}
        # access token -> (user, refresh token); shared by every client of one backend
        self.sessions: Dict[str, Tuple[Dict[str, str], str]] = {}
        self.current: Optional[Dict[str, str]] = None
        self._tokens: Optional[Tuple[str, str]] = None

    def _start_session(self, user: Dict[str, str]) -> SimpleNamespace:
        serial = next(self._backend.ids)
        access_token = f"token-{user['id']}-{serial}"
        refresh_token = f"refresh-{user['id']}-{serial}"
        self.sessions[access_token] = (user, refresh_token)
        self.current = user
        self._tokens = (access_token, refresh_token)
        return SimpleNamespace(
            user=SimpleNamespace(id=user["id"], email=user["email"]),
            session=SimpleNamespace(access_token=access_token, refresh_token=refresh_token),
        )

    def sign_up(self, credentials: Dict[str, str]) -> SimpleNamespace:
        self._backend.check_auth("sign_up")
        email = credentials["email"]
        if email in self.users:
            raise FakeAPIError("User already registered")
        user = {"id": f"user-{next(self._backend.ids)}", "email": email, "password": credentials["password"]}
        self.users[email] = user
        return self._start_session(user)

    def sign_in_with_password(self, credentials: Dict[str, str]) -> SimpleNamespace:
        self._backend.check_auth("sign_in")
        user = self.users.get(credentials["email"])
        if not user or user["password"] != credentials["password"]:
            raise FakeAPIError("Invalid login credentials")
        return self._start_session(user)

    def set_session(self, access_token: str, refresh_token: str) -> SimpleNamespace:
        self._backend.check_auth("set_session")
        stored = self.sessions.get(access_token)
        if stored is None or stored[1] != refresh_token:
            raise FakeAPIError("Invalid Refresh Token: Refresh Token Not Found")
        user = stored[0]
        self.current = user
        self._tokens = (access_token, refresh_token)
        return SimpleNamespace(
            user=SimpleNamespace(id=user["id"], email=user["email"]),
            session=SimpleNamespace(access_token=access_token, refresh_token=refresh_token),
        )

    def get_session(self) -> Optional[SimpleNamespace]:
        if self.current is None or self._tokens is None:
            return None
        return SimpleNamespace(
            user=SimpleNamespace(id=self.current["id"], email=self.current["email"]),
            access_token=self._tokens[0],
            refresh_token=self._tokens[1],
        )

    def sign_out(self) -> None:
        self._backend.check_auth("sign_out")
        if self._tokens is not None:
            self.sessions.pop(self._tokens[0], None)
        self.current = None
        self._tokens = None

    def get_user(self) -> Optional[SimpleNamespace]:
        self._backend.check_auth("get_user")
        if self.current is None:
            return None
        return SimpleNamespace(user=SimpleNamespace(id=self.current["id"], email=self.current["email"]))


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.failures: Dict[Tuple[str, str], str] = {}
        self.auth_failures: Dict[str, str] = {}
        self.calls: List[Tuple[str, str]] = []
        self.ids = itertools.count(1)
        self.auth = FakeAuth(self)

    def new_process(self) -> "FakeSupabase":
        """A fresh client against the same backend: shared data, no in-memory session."""
        client = FakeSupabase()
        client.tables = self.tables
        client.failures = self.failures
        client.auth_failures = self.auth_failures
        client.calls = self.calls
        client.ids = self.ids
        client.auth.users = self.auth.users
        client.auth.sessions = self.auth.sessions
        return client

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def fail(self, table: str, op: str, message: str) -> None:
        self.failures[(table, op)] = message

    def fail_auth(self, method: str, message: str) -> None:
        self.auth_failures[method] = message

    def check_auth(self, method: str) -> None:
        if method in self.auth_failures:
            raise FakeAPIError(self.auth_failures[method])


@pytest.fixture
def fake_client() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def opened() -> List[str]:
    """URIs handed to the CV viewer."""
    return []


@pytest.fixture
def gateway(fake_client: FakeSupabase, tmp_path: Path, opened: List[str]) -> ProfileDataGateway:
    config = GatewayConfig(
        origin="https://portfolio.example.com",
        session_path=tmp_path / "session.json",
        export_dir=tmp_path / "exports",
    )
    return ProfileDataGateway(
        fake_client,
        config=config,
        session=SessionService(config.session_path),
        viewer=opened.append,
        suffix_fn=lambda: "abc12",
    )


@pytest.fixture
def signed_in(gateway: ProfileDataGateway) -> ProfileDataGateway:
    """Gateway with a registered, logged-in user named Jane Doe."""
    assert gateway.register("jane@example.com", "secret123", "Jane Doe").success
    assert gateway.login("jane@example.com", "secret123").success
    return gateway
