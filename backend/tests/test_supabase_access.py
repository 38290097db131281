"""
Supabase data access adapter against a fake async client.

Why:
    The adapter translates between the supabase client and the portal's
    DataAccess contract. These tests pin that translation: not-found versus
    fault, auth error mapping and the shape of the PostgREST requests. A real
    client pointed at a closed port checks that logout and close forget the
    local session even when the backend is unreachable.
"""
from __future__ import annotations

import time
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, List, Optional

import pytest
from postgrest.exceptions import APIError
from postgrest.types import CountMethod
from supabase import acreate_client
from supabase_auth.errors import AuthError, AuthRetryableError
from supabase_auth.types import Session, User

from identity_access.data_access import AuthFailure, Credentials, DataAccessError, Query
from identity_access.gate import AuthorizationGate, Phase
from identity_access.supabase_access import NO_ROWS_CODE, SupabaseBackend, SupabaseDataAccess


pytestmark = pytest.mark.anyio("asyncio")


class _Rejected(AuthError):
    def __init__(self, message: str):
        Exception.__init__(self, message)
        self.message = message


class _Unreachable(AuthRetryableError):
    def __init__(self, message: str):
        Exception.__init__(self, message)
        self.message = message


def _api_error(code: str, message: str = "boom") -> APIError:
    return APIError({"message": message, "code": code, "hint": None, "details": None})


class FakeRequest:
    def __init__(self, table: "FakeTable", op: str, *args: Any, **kwargs: Any):
        self.table = table
        self.calls: List[tuple] = [(op, args, kwargs)]

    def __getattr__(self, name: str):
        if name in ("eq", "in_", "gt", "order", "limit"):
            def _chain(*args: Any, **kwargs: Any) -> "FakeRequest":
                self.calls.append((name, args, kwargs))
                return self
            return _chain
        raise AttributeError(name)

    async def execute(self):
        self.table.requests.append(self.calls)
        if self.table.error is not None:
            raise self.table.error
        return SimpleNamespace(data=self.table.data, count=self.table.count)


class FakeTable:
    def __init__(self, data: Optional[list] = None, count: Optional[int] = None, error: Optional[Exception] = None):
        self.data = data if data is not None else []
        self.count = count
        self.error = error
        self.requests: List[list] = []

    def select(self, *args: Any, **kwargs: Any) -> FakeRequest:
        return FakeRequest(self, "select", *args, **kwargs)

    def insert(self, *args: Any, **kwargs: Any) -> FakeRequest:
        return FakeRequest(self, "insert", *args, **kwargs)

    def update(self, *args: Any, **kwargs: Any) -> FakeRequest:
        return FakeRequest(self, "update", *args, **kwargs)

    def delete(self, *args: Any, **kwargs: Any) -> FakeRequest:
        return FakeRequest(self, "delete", *args, **kwargs)


class FakeAuth:
    def __init__(self):
        self.session = None
        self.listeners = []
        self.unsubscribed = 0
        self.error: Optional[Exception] = None
        self.sign_up_user = None
        self.calls: List[tuple] = []

    async def get_session(self):
        if self.error is not None:
            raise self.error
        return self.session

    def on_auth_state_change(self, callback):
        self.listeners.append(callback)
        auth = self

        class _Subscription:
            def unsubscribe(self_inner):
                auth.unsubscribed += 1

        return _Subscription()

    async def sign_in_with_password(self, payload):
        self.calls.append(("sign_in", payload))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(session=self.session, user=getattr(self.session, "user", None))

    async def sign_up(self, payload):
        self.calls.append(("sign_up", payload))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(user=self.sign_up_user, session=None)

    async def sign_out(self):
        self.calls.append(("sign_out",))
        if self.error is not None:
            raise self.error

    async def update_user(self, attributes):
        self.calls.append(("update_user", attributes))
        if self.error is not None:
            raise self.error

    async def _remove_session(self):
        self.calls.append(("remove_session",))
        self.session = None

    def _notify_all_subscribers(self, event, session):
        for listener in self.listeners:
            listener(event, session)


class FakeClient:
    def __init__(self):
        self.auth = FakeAuth()
        self.tables = {}

    def table(self, name: str) -> FakeTable:
        return self.tables.setdefault(name, FakeTable())


def _session(user_id: str = "u1", email: str = "siswa@sekolah.sch.id"):
    return SimpleNamespace(user=SimpleNamespace(id=user_id, email=email), expires_at=1_900_000_000)


async def test_current_principal_from_session():
    client = FakeClient()
    client.auth.session = _session()
    access = SupabaseDataAccess(client)
    principal = await access.get_current_principal()
    assert principal.id == "u1"
    assert principal.email == "siswa@sekolah.sch.id"
    assert principal.expires_at == 1_900_000_000


async def test_current_principal_never_raises():
    client = FakeClient()
    client.auth.error = RuntimeError("offline")
    assert await SupabaseDataAccess(client).get_current_principal() is None


async def test_auth_events_map_to_principals():
    client = FakeClient()
    access = SupabaseDataAccess(client)
    seen = []
    unsubscribe = access.on_principal_change(seen.append)
    listener = client.auth.listeners[0]

    listener("SIGNED_IN", _session("u1"))
    listener("TOKEN_REFRESHED", _session("u1"))
    listener("SIGNED_OUT", None)
    assert [p.id if p else None for p in seen] == ["u1", "u1", None]

    unsubscribe()
    assert client.auth.unsubscribed == 1


async def test_sign_in_maps_rejection_to_auth_failure():
    client = FakeClient()
    client.auth.error = _Rejected("Invalid login credentials")
    with pytest.raises(AuthFailure) as excinfo:
        await SupabaseDataAccess(client).sign_in(Credentials("a@b.c", "x"))
    assert excinfo.value.message == "Invalid login credentials"


async def test_sign_in_maps_retryable_error_to_fault():
    client = FakeClient()
    client.auth.error = _Unreachable("timeout")
    with pytest.raises(DataAccessError):
        await SupabaseDataAccess(client).sign_in(Credentials("a@b.c", "x"))


async def test_sign_in_without_session_means_unconfirmed():
    client = FakeClient()
    with pytest.raises(AuthFailure) as excinfo:
        await SupabaseDataAccess(client).sign_in(Credentials("a@b.c", "secret"))
    assert excinfo.value.message == "Email not confirmed"


async def test_sign_in_returns_principal():
    client = FakeClient()
    client.auth.session = _session("u9")
    principal = await SupabaseDataAccess(client).sign_in(Credentials("a@b.c", "secret"))
    assert principal.id == "u9"
    assert client.auth.calls == [("sign_in", {"email": "a@b.c", "password": "secret"})]


async def test_sign_up_passes_metadata_and_detects_existing_account():
    client = FakeClient()
    client.auth.sign_up_user = SimpleNamespace(id="u2", identities=[])
    result = await SupabaseDataAccess(client).sign_up(Credentials("a@b.c", "secret"), {"full_name": "A", "role": "Siswa"})
    assert result.already_registered is True
    payload = client.auth.calls[0][1]
    assert payload["options"] == {"data": {"full_name": "A", "role": "Siswa"}}

    client.auth.sign_up_user = SimpleNamespace(id="u3", identities=[{"id": "i"}])
    result = await SupabaseDataAccess(client).sign_up(Credentials("c@b.c", "secret"), {})
    assert result == result.__class__(user_id="u3", already_registered=False)


async def test_sign_out_fault_still_forgets_local_session():
    client = FakeClient()
    client.auth.session = _session()
    access = SupabaseDataAccess(client)
    seen = []
    access.on_principal_change(seen.append)

    client.auth.error = RuntimeError("offline")
    with pytest.raises(DataAccessError):
        await access.sign_out()

    assert ("remove_session",) in client.auth.calls
    assert seen == [None]
    client.auth.error = None
    assert await access.get_current_principal() is None


async def test_sign_out_success_leaves_cleanup_to_the_client():
    client = FakeClient()
    client.auth.session = _session()
    await SupabaseDataAccess(client).sign_out()
    assert client.auth.calls == [("sign_out",)]


async def test_aclose_forgets_session_without_signed_out_event():
    client = FakeClient()
    client.auth.session = _session()
    access = SupabaseDataAccess(client)
    seen = []
    access.on_principal_change(seen.append)

    await access.aclose()
    await access.aclose()

    assert client.auth.session is None
    assert seen == []


def _saved_session() -> Session:
    user = User(
        id="u1",
        email="siswa@sekolah.sch.id",
        app_metadata={},
        user_metadata={},
        aud="authenticated",
        created_at=datetime.now(timezone.utc),
    )
    return Session(
        access_token="access",
        refresh_token="refresh",
        expires_in=3600,
        expires_at=int(time.time()) + 3600,
        token_type="bearer",
        user=user,
    )


async def _unreachable_client():
    # Nothing listens on the discard port.
    client = await acreate_client("http://127.0.0.1:9", "anon-key")
    await client.auth._save_session(_saved_session())
    return client


async def test_failed_remote_sign_out_clears_real_client():
    client = await _unreachable_client()
    access = SupabaseDataAccess(client)
    seen = []
    access.on_principal_change(seen.append)
    assert (await access.get_current_principal()).id == "u1"
    assert client.auth._refresh_token_timer is not None

    with pytest.raises(DataAccessError):
        await access.sign_out()

    assert await access.get_current_principal() is None
    assert client.auth._refresh_token_timer is None
    assert seen[-1] is None


async def test_gate_logout_is_final_when_backend_is_unreachable():
    client = await _unreachable_client()
    access = SupabaseDataAccess(client)
    gate = AuthorizationGate(access)
    await gate.start()
    await gate.logout()

    assert gate.state.phase is Phase.UNAUTHENTICATED
    assert await access.get_current_principal() is None
    assert client.auth._refresh_token_timer is None
    await gate.close()


async def test_aclose_cancels_real_refresh_timer():
    client = await _unreachable_client()
    assert client.auth._refresh_token_timer is not None

    await SupabaseDataAccess(client).aclose()

    assert client.auth._refresh_token_timer is None
    assert await client.auth.get_session() is None


async def test_update_credentials_rejection():
    client = FakeClient()
    client.auth.error = _Rejected("New password should be different from the old password.")
    with pytest.raises(AuthFailure):
        await SupabaseDataAccess(client).update_credentials(password="secret1")


async def test_find_one_returns_first_row_and_limits():
    client = FakeClient()
    client.tables["profiles"] = FakeTable(data=[{"id": "u1", "role": "Siswa"}])
    row = await SupabaseDataAccess(client).find_one("profiles", {"id": "u1"})
    assert row == {"id": "u1", "role": "Siswa"}
    calls = client.tables["profiles"].requests[0]
    assert ("eq", ("id", "u1"), {}) in calls
    assert ("limit", (1,), {}) in calls


async def test_find_one_no_rows_is_none():
    client = FakeClient()
    assert await SupabaseDataAccess(client).find_one("profiles", {"id": "u1"}) is None

    client.tables["profiles"] = FakeTable(error=_api_error(NO_ROWS_CODE))
    assert await SupabaseDataAccess(client).find_one("profiles", {"id": "u1"}) is None


async def test_find_one_api_error_is_fault():
    client = FakeClient()
    client.tables["profiles"] = FakeTable(error=_api_error("42501", "permission denied"))
    with pytest.raises(DataAccessError):
        await SupabaseDataAccess(client).find_one("profiles", {"id": "u1"})


async def test_find_one_transport_error_is_fault():
    client = FakeClient()
    client.tables["profiles"] = FakeTable(error=ConnectionError("reset"))
    with pytest.raises(DataAccessError):
        await SupabaseDataAccess(client).find_one("profiles", {"id": "u1"})


async def test_select_builds_filters_order_and_limit():
    client = FakeClient()
    client.tables["assignments"] = FakeTable(data=[{"id": "a1"}])
    rows = await SupabaseDataAccess(client).select(
        Query(
            collection="assignments",
            eq={"course_id": "c1"},
            in_={"id": ("a1", "a2")},
            gt={"due_date": "2024-05-01"},
            order_by="due_date",
            descending=True,
            limit=3,
        )
    )
    assert rows == [{"id": "a1"}]
    calls = client.tables["assignments"].requests[0]
    assert calls[0] == ("select", ("*",), {})
    assert ("eq", ("course_id", "c1"), {}) in calls
    assert ("in_", ("id", ["a1", "a2"]), {}) in calls
    assert ("gt", ("due_date", "2024-05-01"), {}) in calls
    assert ("order", ("due_date",), {"desc": True}) in calls
    assert ("limit", (3,), {}) in calls


async def test_count_uses_exact_head_request_and_bool_literals():
    client = FakeClient()
    client.tables["notifications"] = FakeTable(count=4)
    total = await SupabaseDataAccess(client).count(Query(collection="notifications", eq={"is_read": False}))
    assert total == 4
    calls = client.tables["notifications"].requests[0]
    assert calls[0] == ("select", ("*",), {"count": CountMethod.exact, "head": True})
    assert ("eq", ("is_read", "false"), {}) in calls


async def test_update_and_delete_report_affected_rows():
    client = FakeClient()
    client.tables["profiles"] = FakeTable(data=[{"id": "u1", "status": "approved"}])
    access = SupabaseDataAccess(client)
    assert await access.update("profiles", {"id": "u1"}, {"status": "approved"}) == [{"id": "u1", "status": "approved"}]
    assert await access.delete("profiles", {"id": "u1"}) == 1

    client.tables["profiles"] = FakeTable(data=[])
    assert await access.delete("profiles", {"id": "u1"}) == 0


async def test_insert_error_is_fault():
    client = FakeClient()
    client.tables["attendance"] = FakeTable(error=_api_error("23505", "duplicate key"))
    with pytest.raises(DataAccessError):
        await SupabaseDataAccess(client).insert("attendance", {"user_id": "u1"})


async def test_backend_opens_one_client_per_session():
    created = []

    async def factory(url, key):
        created.append((url, key))
        return FakeClient()

    backend = SupabaseBackend("https://x.supabase.co", "anon", client_factory=factory)
    first = await backend.open_session()
    second = await backend.open_session()
    assert first is not second
    assert created == [("https://x.supabase.co", "anon"), ("https://x.supabase.co", "anon")]


async def test_backend_client_failure_is_fault():
    async def factory(url, key):
        raise ValueError("Invalid API key")

    backend = SupabaseBackend("https://x.supabase.co", "anon", client_factory=factory)
    with pytest.raises(DataAccessError):
        await backend.open_session()
