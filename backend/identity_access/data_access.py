"""Data access collaborator interface shared by the gate and the dashboards."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

from .domain import Principal


PrincipalListener = Callable[[Optional[Principal]], None]
Unsubscribe = Callable[[], None]


class DataAccessError(Exception):
    """A fault while talking to the backend (network, service, policy)."""


class AuthFailure(Exception):
    """The identity backend rejected credentials or a sign-up.

    `message` is safe to show to the user.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class Credentials:
    email: str
    password: str


@dataclass(frozen=True)
class SignUpResult:
    """Outcome of a sign-up.

    `already_registered` is True when the backend reports an existing but
    unconfirmed account for the email (no identities attached).
    """

    user_id: Optional[str]
    already_registered: bool = False


@dataclass(frozen=True)
class Query:
    """Filtered read against one collection.

    Filters combine with AND. `gt` compares with the backend's ordering
    (ISO dates and timestamps compare as strings).
    """

    collection: str
    eq: Mapping[str, Any] = field(default_factory=dict)
    in_: Mapping[str, Sequence[Any]] = field(default_factory=dict)
    gt: Mapping[str, Any] = field(default_factory=dict)
    order_by: Optional[str] = None
    descending: bool = False
    limit: Optional[int] = None


class DataAccess(Protocol):
    """Per-browsing-context handle on the backend."""

    async def get_current_principal(self) -> Optional[Principal]: ...

    def on_principal_change(self, callback: PrincipalListener) -> Unsubscribe: ...

    async def find_one(self, collection: str, filters: Mapping[str, Any]) -> Optional[Dict[str, Any]]: ...

    async def select(self, query: Query) -> List[Dict[str, Any]]: ...

    async def count(self, query: Query) -> int: ...

    async def insert(self, collection: str, values: Mapping[str, Any]) -> Dict[str, Any]: ...

    async def update(self, collection: str, match: Mapping[str, Any], values: Mapping[str, Any]) -> List[Dict[str, Any]]: ...

    async def delete(self, collection: str, match: Mapping[str, Any]) -> int: ...

    async def sign_in(self, credentials: Credentials) -> Principal: ...

    async def sign_up(self, credentials: Credentials, metadata: Mapping[str, Any]) -> SignUpResult: ...

    async def sign_out(self) -> None: ...

    async def update_credentials(self, *, password: str) -> None: ...

    async def aclose(self) -> None: ...


class Backend(Protocol):
    """Process-wide backend; hands out one DataAccess per browsing context."""

    async def open_session(self) -> DataAccess: ...

    async def aclose(self) -> None: ...


__all__ = [
    "PrincipalListener",
    "Unsubscribe",
    "DataAccessError",
    "AuthFailure",
    "Credentials",
    "SignUpResult",
    "Query",
    "DataAccess",
    "Backend",
]
