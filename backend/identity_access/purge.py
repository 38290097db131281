"""
Identity purge adapters (second phase of user removal).

Why:
    Removing a user happens in two phases. Deleting the profile record is
    immediate and runs under the admin's own session. Purging the identity
    itself needs an elevated, server-side operation (a Supabase edge function
    holding the service role key). That phase is eventual and outside the
    portal's control, so adapters here log failures instead of raising.
"""
from __future__ import annotations

from typing import Protocol
import logging

import httpx


logger = logging.getLogger("siakad.identity_access")


class IdentityPurger(Protocol):
    async def purge_identity(self, user_id: str) -> None: ...


class NullIdentityPurger:
    """Fallback when no purge function is configured: log only."""

    async def purge_identity(self, user_id: str) -> None:
        logger.info("Identity purge for %s not configured; remove it in the Supabase Auth panel", user_id)


class EdgeFunctionPurger:
    """Invoke a Supabase edge function that deletes the auth user."""

    def __init__(
        self,
        *,
        base_url: str,
        service_key: str,
        function: str = "delete-user",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = f"{base_url.rstrip('/')}/functions/v1/{function}"
        self._service_key = service_key
        self._timeout = timeout
        self._transport = transport

    async def purge_identity(self, user_id: str) -> None:
        headers = {
            "Authorization": f"Bearer {self._service_key}",
            "apikey": self._service_key,
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(self._url, json={"userId": user_id}, headers=headers)
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Identity purge for %s failed: %s", user_id, exc.__class__.__name__)
            return
        logger.info("Identity purge requested for %s", user_id)


__all__ = ["IdentityPurger", "NullIdentityPurger", "EdgeFunctionPurger"]
