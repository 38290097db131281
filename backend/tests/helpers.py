"""Shared helpers for HTTP-level tests."""
from __future__ import annotations

import httpx


ORIGIN = {"Origin": "https://test"}


async def login(client: httpx.AsyncClient, email: str, password: str) -> httpx.Response:
    """Post the login form from the portal's own origin (no redirect following)."""
    return await client.post(
        "/auth/login",
        data={"email": email, "password": password},
        headers=ORIGIN,
        follow_redirects=False,
    )


async def post_form(client: httpx.AsyncClient, url: str, data: dict | None = None) -> httpx.Response:
    return await client.post(url, data=data or {}, headers=ORIGIN, follow_redirects=False)
