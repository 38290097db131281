"""
In-memory store of portal sessions (one per browsing context).

Why: Keep identity state server-side. The browser only carries an opaque
session id; the matching `PortalSession` holds the data access handle (and
with it the backend auth session) plus the authorization gate.

Lifecycle: sessions expire after an idle TTL. Sessions without a principal get
a short TTL and are capped in number, so cookieless traffic cannot pile up
backend clients; signing in promotes a session to the full TTL. Expired,
evicted or discarded sessions are closed: the gate unsubscribes from identity
changes and the handle is released.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional
import logging
import secrets
import time

from .data_access import Backend, DataAccess
from .gate import AuthorizationGate


logger = logging.getLogger("siakad.identity_access")

DEFAULT_TTL_SECONDS = 8 * 3600
DEFAULT_ANONYMOUS_TTL_SECONDS = 15 * 60
DEFAULT_MAX_ANONYMOUS = 100


def _now() -> int:
    return int(time.time())


@dataclass
class PortalSession:
    session_id: str
    access: DataAccess
    gate: AuthorizationGate
    expires_at: int
    flash: Optional[str] = field(default=None)

    @property
    def signed_in(self) -> bool:
        return self.gate.state.principal is not None

    async def close(self) -> None:
        await self.gate.close()
        try:
            await self.access.aclose()
        except Exception as exc:
            logger.warning("Releasing data access failed: %s", exc.__class__.__name__)

    def pop_flash(self) -> Optional[str]:
        message, self.flash = self.flash, None
        return message


class PortalSessionStore:
    def __init__(
        self,
        *,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        anonymous_ttl_seconds: int = DEFAULT_ANONYMOUS_TTL_SECONDS,
        max_anonymous: int = DEFAULT_MAX_ANONYMOUS,
    ):
        self._data: Dict[str, PortalSession] = {}
        self.ttl_seconds = ttl_seconds
        self.anonymous_ttl_seconds = min(anonymous_ttl_seconds, ttl_seconds)
        self.max_anonymous = max(1, max_anonymous)

    def _lifetime(self, rec: PortalSession) -> int:
        return self.ttl_seconds if rec.signed_in else self.anonymous_ttl_seconds

    async def create(self, backend: Backend) -> PortalSession:
        """Open a data access handle, start a gate on it and register both."""
        await self.prune()
        await self._make_room_for_anonymous()
        access = await backend.open_session()
        gate = AuthorizationGate(access)
        await gate.start()
        sid = secrets.token_urlsafe(24)
        rec = PortalSession(session_id=sid, access=access, gate=gate, expires_at=0)
        rec.expires_at = _now() + self._lifetime(rec)
        self._data[sid] = rec
        return rec

    async def get(self, session_id: str) -> Optional[PortalSession]:
        rec = self._data.get(session_id)
        if not rec:
            return None
        if rec.expires_at < _now():
            await self.discard(session_id)
            return None
        rec.expires_at = _now() + self._lifetime(rec)
        return rec

    def rotate(self, session_id: str) -> Optional[PortalSession]:
        """Move a session to a fresh id (after sign-in, against fixation)."""
        rec = self._data.pop(session_id, None)
        if rec is None:
            return None
        rec.session_id = secrets.token_urlsafe(24)
        rec.expires_at = _now() + self.ttl_seconds
        self._data[rec.session_id] = rec
        return rec

    async def discard(self, session_id: str) -> None:
        rec = self._data.pop(session_id, None)
        if rec is not None:
            await rec.close()

    async def prune(self) -> int:
        """Close every expired session; returns how many were dropped."""
        now = _now()
        expired = [sid for sid, rec in self._data.items() if rec.expires_at < now]
        for sid in expired:
            await self.discard(sid)
        return len(expired)

    async def _make_room_for_anonymous(self) -> None:
        # Least recently used first: anonymous sessions share one TTL.
        anonymous = sorted((rec for rec in self._data.values() if not rec.signed_in), key=lambda rec: rec.expires_at)
        excess = len(anonymous) - self.max_anonymous + 1
        for rec in anonymous[: max(0, excess)]:
            await self.discard(rec.session_id)
        if excess > 0:
            logger.info("Evicted %d anonymous portal sessions", excess)

    async def close_all(self) -> None:
        for sid in list(self._data):
            await self.discard(sid)

    def __len__(self) -> int:
        return len(self._data)


__all__ = [
    "PortalSession",
    "PortalSessionStore",
    "DEFAULT_TTL_SECONDS",
    "DEFAULT_ANONYMOUS_TTL_SECONDS",
    "DEFAULT_MAX_ANONYMOUS",
]
