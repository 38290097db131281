"""
Shared session-cookie helpers.

Why:
    The portal-session middleware sets the cookie on first contact and again
    after the sign-in rotation. Both must apply the same flags.
"""

from __future__ import annotations

from fastapi import Response


SESSION_COOKIE_NAME = "siakad_session"


def cookie_opts(environment: str) -> dict:
    """Return hardened cookie flags (dev = prod).

    SameSite=Lax keeps the cookie on top-level navigations (links from mail
    clients into the portal) while blocking it on cross-site POSTs.
    """
    return {"secure": True, "samesite": "lax"}


def set_session_cookie(response: Response, session_id: str, *, environment: str, max_age: int) -> None:
    opts = cookie_opts(environment)
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_id,
        httponly=True,
        secure=opts["secure"],
        samesite=opts["samesite"],
        path="/",
        max_age=max_age,
    )


__all__ = ["SESSION_COOKIE_NAME", "cookie_opts", "set_session_cookie"]
