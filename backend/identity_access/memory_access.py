"""
In-memory backend for development and tests.

Why: Run the portal without a Supabase project. Tables and accounts live in a
process-local store shared by all browsing contexts; each context gets its own
`InMemoryDataAccess` with its own signed-in principal, mirroring one Supabase
client per user.

Behavior parity with the hosted backend:
- Sign-up emulates the database trigger that creates a `pending` profile from
  the sign-up metadata.
- Identity changes notify listeners synchronously, like the auth client does.
- Not for production: data vanishes with the process.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
import copy
import time
import uuid

from .data_access import (
    AuthFailure,
    Credentials,
    PrincipalListener,
    Query,
    SignUpResult,
    Unsubscribe,
)
from .domain import AccountStatus, PROFILES_COLLECTION, Principal, Role


TOKEN_TTL_SECONDS = 3600


@dataclass
class _Account:
    id: str
    email: str
    password: str


def _matches(row: Mapping[str, Any], query: Query) -> bool:
    for key, value in query.eq.items():
        if row.get(key) != value:
            return False
    for key, values in query.in_.items():
        if row.get(key) not in set(values):
            return False
    for key, value in query.gt.items():
        current = row.get(key)
        if current is None or not current > value:
            return False
    return True


class InMemoryBackend:
    """Shared tables and accounts; hands out per-context handles."""

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self._accounts: Dict[str, _Account] = {}
        self.purged: List[str] = []

    async def open_session(self) -> "InMemoryDataAccess":
        return InMemoryDataAccess(self)

    async def aclose(self) -> None:
        return None

    # --- Seeding -----------------------------------------------------------

    def add_account(
        self,
        *,
        email: str,
        password: str,
        full_name: str,
        role: Role | str = Role.STUDENT,
        status: AccountStatus | str = AccountStatus.PENDING,
        create_profile: bool = True,
    ) -> str:
        """Create an account (and optionally its profile) directly; returns the id."""
        account = _Account(id=str(uuid.uuid4()), email=email.strip().lower(), password=password)
        self._accounts[account.email] = account
        if create_profile:
            self.table(PROFILES_COLLECTION).append(
                {
                    "id": account.id,
                    "full_name": full_name,
                    "role": role.value if isinstance(role, Role) else role,
                    "status": status.value if isinstance(status, AccountStatus) else status,
                    "pending_email": account.email,
                }
            )
        return account.id

    def table(self, name: str) -> List[Dict[str, Any]]:
        return self.tables.setdefault(name, [])

    async def purge_identity(self, user_id: str) -> None:
        """Remove the identity itself (second phase of user removal)."""
        for email, account in list(self._accounts.items()):
            if account.id == user_id:
                del self._accounts[email]
        self.purged.append(user_id)

    # --- Internal helpers used by handles -------------------------------------

    def _account_for(self, email: str) -> Optional[_Account]:
        return self._accounts.get(email.strip().lower())

    def _account_by_id(self, user_id: str) -> Optional[_Account]:
        for account in self._accounts.values():
            if account.id == user_id:
                return account
        return None


def seed_demo_accounts(backend: InMemoryBackend) -> None:
    """Seed one approved admin and one approved student for local runs."""
    backend.add_account(
        email="admin@siakad.local",
        password="admin123",
        full_name="Admin Sekolah",
        role=Role.TEACHER_ADMIN,
        status=AccountStatus.APPROVED,
    )
    backend.add_account(
        email="siswa@siakad.local",
        password="siswa123",
        full_name="Siswa Contoh",
        role=Role.STUDENT,
        status=AccountStatus.APPROVED,
    )
    backend.table("courses").extend(
        [
            {"id": "c-korespondensi", "course_name": "Korespondensi"},
            {"id": "c-akuntansi", "course_name": "Akuntansi Dasar"},
        ]
    )


class InMemoryDataAccess:
    """DataAccess handle bound to one browsing context."""

    def __init__(self, backend: InMemoryBackend) -> None:
        self._backend = backend
        self._principal: Optional[Principal] = None
        self._listeners: List[PrincipalListener] = []

    # --- Identity ------------------------------------------------------------

    async def get_current_principal(self) -> Optional[Principal]:
        principal = self._principal
        if principal is None:
            return None
        if principal.expires_at is not None and principal.expires_at < int(time.time()):
            self._set_principal(None)
            return None
        if self._backend._account_by_id(principal.id) is None:
            self._set_principal(None)
            return None
        return principal

    def on_principal_change(self, callback: PrincipalListener) -> Unsubscribe:
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    async def sign_in(self, credentials: Credentials) -> Principal:
        account = self._backend._account_for(credentials.email)
        if account is None or account.password != credentials.password:
            raise AuthFailure("Invalid login credentials")
        principal = Principal(id=account.id, email=account.email, expires_at=int(time.time()) + TOKEN_TTL_SECONDS)
        self._set_principal(principal)
        return principal

    async def sign_up(self, credentials: Credentials, metadata: Mapping[str, Any]) -> SignUpResult:
        existing = self._backend._account_for(credentials.email)
        if existing is not None:
            return SignUpResult(user_id=existing.id, already_registered=True)
        if len(credentials.password) < 6:
            raise AuthFailure("Password should be at least 6 characters.")
        user_id = self._backend.add_account(
            email=credentials.email,
            password=credentials.password,
            full_name=str(metadata.get("full_name") or ""),
            role=str(metadata.get("role") or Role.STUDENT.value),
            status=AccountStatus.PENDING,
        )
        return SignUpResult(user_id=user_id)

    async def sign_out(self) -> None:
        self._set_principal(None)

    async def update_credentials(self, *, password: str) -> None:
        principal = self._principal
        account = self._backend._account_by_id(principal.id) if principal else None
        if account is None:
            raise AuthFailure("Auth session missing!")
        if len(password) < 6:
            raise AuthFailure("Password should be at least 6 characters.")
        account.password = password
        self._notify(principal)

    async def aclose(self) -> None:
        self._listeners.clear()

    def _set_principal(self, principal: Optional[Principal]) -> None:
        if principal is None and self._principal is None:
            return
        self._principal = principal
        self._notify(principal)

    def _notify(self, principal: Optional[Principal]) -> None:
        for listener in list(self._listeners):
            listener(principal)

    # --- Records -------------------------------------------------------------

    async def find_one(self, collection: str, filters: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        rows = await self.select(Query(collection=collection, eq=dict(filters), limit=1))
        return rows[0] if rows else None

    async def select(self, query: Query) -> List[Dict[str, Any]]:
        rows = [copy.deepcopy(r) for r in self._backend.table(query.collection) if _matches(r, query)]
        if query.order_by:
            key = query.order_by
            rows.sort(key=lambda r: (r.get(key) is None, r.get(key)), reverse=query.descending)
        if query.limit is not None:
            rows = rows[: query.limit]
        return rows

    async def count(self, query: Query) -> int:
        return sum(1 for r in self._backend.table(query.collection) if _matches(r, query))

    async def insert(self, collection: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        row = dict(values)
        row.setdefault("id", str(uuid.uuid4()))
        self._backend.table(collection).append(row)
        return copy.deepcopy(row)

    async def update(self, collection: str, match: Mapping[str, Any], values: Mapping[str, Any]) -> List[Dict[str, Any]]:
        query = Query(collection=collection, eq=dict(match))
        updated = []
        for row in self._backend.table(collection):
            if _matches(row, query):
                row.update(values)
                updated.append(copy.deepcopy(row))
        return updated

    async def delete(self, collection: str, match: Mapping[str, Any]) -> int:
        query = Query(collection=collection, eq=dict(match))
        table = self._backend.table(collection)
        keep = [r for r in table if not _matches(r, query)]
        removed = len(table) - len(keep)
        table[:] = keep
        return removed


__all__ = ["InMemoryBackend", "InMemoryDataAccess", "seed_demo_accounts"]
