"""
Supabase-backed data access.

This adapter implements the DataAccess protocol on top of the async
`supabase` client. Each browsing context gets its own client so that the auth
session (and therefore the PostgREST bearer token used for row-level
policies) never bleeds between users.

Security:
- Clients are created with the anon key; row-level policies decide access.
- Never log tokens or passwords; principal ids only.
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional
import logging

from postgrest.exceptions import APIError
from postgrest.types import CountMethod
from supabase import AsyncClient, acreate_client
from supabase_auth.errors import AuthError, AuthRetryableError

from .data_access import (
    AuthFailure,
    Credentials,
    DataAccessError,
    PrincipalListener,
    Query,
    SignUpResult,
    Unsubscribe,
)
from .domain import Principal


logger = logging.getLogger("siakad.identity_access")

# PostgREST error code for "JSON object requested, multiple (or no) rows returned".
NO_ROWS_CODE = "PGRST116"

ClientFactory = Callable[[str, str], Awaitable[AsyncClient]]


def _principal_from_session(session: Any) -> Optional[Principal]:
    user = getattr(session, "user", None) if session is not None else None
    user_id = getattr(user, "id", None)
    if not user_id:
        return None
    return Principal(
        id=str(user_id),
        email=getattr(user, "email", None),
        expires_at=getattr(session, "expires_at", None),
    )


def _filter_value(value: Any) -> Any:
    # PostgREST expects lowercase boolean literals.
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class SupabaseBackend:
    """Process-wide Supabase configuration; opens one client per context."""

    def __init__(self, url: str, anon_key: str, *, client_factory: ClientFactory | None = None) -> None:
        self._url = url
        self._anon_key = anon_key
        self._client_factory = client_factory or acreate_client

    async def open_session(self) -> "SupabaseDataAccess":
        try:
            client = await self._client_factory(self._url, self._anon_key)
        except Exception as exc:
            logger.warning("Supabase client unavailable: %s: %s", exc.__class__.__name__, str(exc))
            raise DataAccessError("supabase_client_unavailable") from exc
        return SupabaseDataAccess(client)

    async def aclose(self) -> None:
        return None


class SupabaseDataAccess:
    """DataAccess over one `supabase.AsyncClient`."""

    def __init__(self, client: Any) -> None:
        self._client = client

    # --- Identity ------------------------------------------------------------

    async def get_current_principal(self) -> Optional[Principal]:
        try:
            session = await self._client.auth.get_session()
        except Exception as exc:
            logger.warning("Session lookup failed: %s: %s", exc.__class__.__name__, str(exc))
            return None
        return _principal_from_session(session)

    def on_principal_change(self, callback: PrincipalListener) -> Unsubscribe:
        def _listener(event: str, session: Any) -> None:
            if event == "SIGNED_OUT":
                callback(None)
                return
            callback(_principal_from_session(session))

        subscription = self._client.auth.on_auth_state_change(_listener)
        return subscription.unsubscribe

    async def sign_in(self, credentials: Credentials) -> Principal:
        try:
            res = await self._client.auth.sign_in_with_password(
                {"email": credentials.email, "password": credentials.password}
            )
        except AuthRetryableError as exc:
            raise DataAccessError(str(exc)) from exc
        except AuthError as exc:
            raise AuthFailure(exc.message) from exc
        except Exception as exc:
            raise DataAccessError(str(exc)) from exc
        principal = _principal_from_session(getattr(res, "session", None))
        if principal is None:
            raise AuthFailure("Email not confirmed")
        return principal

    async def sign_up(self, credentials: Credentials, metadata: Mapping[str, Any]) -> SignUpResult:
        try:
            res = await self._client.auth.sign_up(
                {
                    "email": credentials.email,
                    "password": credentials.password,
                    "options": {"data": dict(metadata)},
                }
            )
        except AuthRetryableError as exc:
            raise DataAccessError(str(exc)) from exc
        except AuthError as exc:
            raise AuthFailure(exc.message) from exc
        except Exception as exc:
            raise DataAccessError(str(exc)) from exc
        user = getattr(res, "user", None)
        if user is None:
            return SignUpResult(user_id=None)
        identities = getattr(user, "identities", None)
        # An existing, unconfirmed account comes back with an empty identity list.
        already = identities is not None and len(identities) == 0
        return SignUpResult(user_id=str(user.id), already_registered=already)

    async def sign_out(self) -> None:
        """Revoke the session remotely; on a fault, still forget it locally.

        The auth client only drops its stored session and refresh timer after
        the remote call succeeds, so a failed sign-out would otherwise leave the
        principal (and a future TOKEN_REFRESHED) behind.
        """
        try:
            await self._client.auth.sign_out()
        except Exception as exc:
            await self._drop_local_session(notify=True)
            raise DataAccessError(str(exc)) from exc

    async def update_credentials(self, *, password: str) -> None:
        try:
            await self._client.auth.update_user({"password": password})
        except AuthRetryableError as exc:
            raise DataAccessError(str(exc)) from exc
        except AuthError as exc:
            raise AuthFailure(exc.message) from exc
        except Exception as exc:
            raise DataAccessError(str(exc)) from exc

    async def aclose(self) -> None:
        """Stop the token refresh timer and forget the session. Idempotent."""
        await self._drop_local_session(notify=False)

    async def _drop_local_session(self, *, notify: bool) -> None:
        auth = self._client.auth
        await auth._remove_session()
        if notify:
            auth._notify_all_subscribers("SIGNED_OUT", None)

    # --- Records -------------------------------------------------------------

    def _filtered(self, request: Any, query: Query) -> Any:
        for key, value in query.eq.items():
            request = request.eq(key, _filter_value(value))
        for key, values in query.in_.items():
            request = request.in_(key, list(values))
        for key, value in query.gt.items():
            request = request.gt(key, _filter_value(value))
        return request

    async def _execute(self, request: Any, collection: str) -> Any:
        try:
            return await request.execute()
        except APIError:
            raise
        except Exception as exc:
            logger.warning("Backend request on %s failed: %s", collection, exc.__class__.__name__)
            raise DataAccessError(str(exc)) from exc

    async def find_one(self, collection: str, filters: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        request = self._filtered(self._client.table(collection).select("*"), Query(collection=collection, eq=dict(filters)))
        try:
            res = await self._execute(request.limit(1), collection)
        except APIError as exc:
            if exc.code == NO_ROWS_CODE:
                return None
            raise DataAccessError(exc.message or str(exc)) from exc
        rows = res.data or []
        return rows[0] if rows else None

    async def select(self, query: Query) -> List[Dict[str, Any]]:
        request = self._filtered(self._client.table(query.collection).select("*"), query)
        if query.order_by:
            request = request.order(query.order_by, desc=query.descending)
        if query.limit is not None:
            request = request.limit(query.limit)
        try:
            res = await self._execute(request, query.collection)
        except APIError as exc:
            raise DataAccessError(exc.message or str(exc)) from exc
        return list(res.data or [])

    async def count(self, query: Query) -> int:
        request = self._client.table(query.collection).select("*", count=CountMethod.exact, head=True)
        try:
            res = await self._execute(self._filtered(request, query), query.collection)
        except APIError as exc:
            raise DataAccessError(exc.message or str(exc)) from exc
        return int(res.count or 0)

    async def insert(self, collection: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        request = self._client.table(collection).insert(dict(values))
        try:
            res = await self._execute(request, collection)
        except APIError as exc:
            raise DataAccessError(exc.message or str(exc)) from exc
        rows = res.data or []
        return rows[0] if rows else dict(values)

    async def update(self, collection: str, match: Mapping[str, Any], values: Mapping[str, Any]) -> List[Dict[str, Any]]:
        request = self._client.table(collection).update(dict(values))
        request = self._filtered(request, Query(collection=collection, eq=dict(match)))
        try:
            res = await self._execute(request, collection)
        except APIError as exc:
            raise DataAccessError(exc.message or str(exc)) from exc
        return list(res.data or [])

    async def delete(self, collection: str, match: Mapping[str, Any]) -> int:
        request = self._client.table(collection).delete()
        request = self._filtered(request, Query(collection=collection, eq=dict(match)))
        try:
            res = await self._execute(request, collection)
        except APIError as exc:
            raise DataAccessError(exc.message or str(exc)) from exc
        return len(res.data or [])


__all__ = ["SupabaseBackend", "SupabaseDataAccess", "NO_ROWS_CODE"]
