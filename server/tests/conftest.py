from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Callable, Optional

import pytest


class FakeQuery:
    def __init__(self, client: "FakeSupabase", table: str) -> None:
        self._client = client
        self._table = table
        self._op: Optional[str] = None
        self._key: Optional[str] = None
        self._row: Optional[dict[str, Any]] = None

    def select(self, columns: str) -> "FakeQuery":
        self._op = "select"
        return self

    def eq(self, column: str, value: str) -> "FakeQuery":
        self._key = value
        return self

    def maybe_single(self) -> "FakeQuery":
        return self

    def upsert(self, row: dict[str, Any], on_conflict: Optional[str] = None) -> "FakeQuery":
        self._op = "upsert"
        self._row = row
        self._client.conflict_keys.append(on_conflict)
        return self

    def execute(self) -> Any:
        self._client.calls.append((self._table, self._op))
        if self._client.fail:
            raise RuntimeError("storage unavailable")
        rows = self._client.rows
        if self._op == "select":
            row = rows.get(self._key)
            # Mirrors supabase-py, which returns no response for a missing row.
            return None if row is None else SimpleNamespace(data={"config": row["config"]})
        assert self._row is not None
        rows[self._row["user_id"]] = {"user_id": self._row["user_id"], "config": dict(self._row["config"])}
        return SimpleNamespace(data=[self._row])


class FakeAuth:
    def __init__(self, user_id: Optional[str] = None) -> None:
        self.user_id = user_id
        self.tokens: dict[str, str] = {}
        self.listeners: list[Callable[[str, Any], None]] = []
        self.fail = False
        self.listen_fail = False
        self.next_user_id = "anon-user"

    def _session(self) -> Any:
        if self.user_id is None:
            return None
        return SimpleNamespace(
            user=SimpleNamespace(id=self.user_id),
            access_token=f"access-{self.user_id}",
            refresh_token=f"refresh-{self.user_id}",
        )

    def _fire(self, event: str) -> None:
        for listener in list(self.listeners):
            listener(event, self._session())

    def get_session(self) -> Any:
        return self._session()

    def sign_in_anonymously(self) -> Any:
        if self.fail:
            raise RuntimeError("auth down")
        self.user_id = self.next_user_id
        self.tokens[f"access-{self.user_id}"] = self.user_id
        self._fire("SIGNED_IN")
        return SimpleNamespace(user=SimpleNamespace(id=self.user_id), session=self._session())

    def set_session(self, access_token: str, refresh_token: str) -> Any:
        if self.fail or access_token not in self.tokens:
            raise RuntimeError("Invalid Refresh Token")
        self.user_id = self.tokens[access_token]
        self._fire("SIGNED_IN")
        return SimpleNamespace(user=SimpleNamespace(id=self.user_id), session=self._session())

    def sign_out(self) -> None:
        if self.fail:
            raise RuntimeError("auth down")
        self.user_id = None
        self._fire("SIGNED_OUT")

    def get_user(self, jwt: str) -> Any:
        if jwt not in self.tokens:
            raise RuntimeError("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(id=self.tokens[jwt]))

    def on_auth_state_change(self, callback: Callable[[str, Any], None]) -> Any:
        if self.listen_fail:
            raise RuntimeError("realtime auth listener failed")
        self.listeners.append(callback)
        return SimpleNamespace(unsubscribe=lambda: self.listeners.remove(callback))


class FakeSupabase:
    """In-memory stand-in for the supabase client, recording every executed call."""

    def __init__(self, user_id: Optional[str] = None) -> None:
        self.rows: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, Optional[str]]] = []
        self.conflict_keys: list[Optional[str]] = []
        self.fail = False
        self.auth = FakeAuth(user_id)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()
