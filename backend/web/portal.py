"""
Request-scoped access to the portal session and shared response helpers.

Why:
    Every page route needs the same three steps: find the portal session the
    middleware attached, let the gate settle, and refuse (redirect to `/`)
    when the gate's view does not allow the page. Keeping them here avoids
    drift between the student, admin and profile routers.
"""
from __future__ import annotations

from typing import Optional, Tuple

from fastapi import Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from identity_access.gate import View
from identity_access.stores import PortalSession

from .components import Layout


DASHBOARD_VIEWS = (View.STUDENT_DASHBOARD, View.ADMIN_DASHBOARD)


def private_no_store() -> dict:
    return {"Cache-Control": "private, no-store"}


def get_portal(request: Request) -> PortalSession:
    return request.state.portal


async def current_view(request: Request) -> View:
    portal = get_portal(request)
    await portal.gate.settle()
    return portal.gate.view


async def require_view(request: Request, *views: View) -> Tuple[PortalSession, Optional[Response]]:
    """Return (portal, None) when the gate allows one of `views`.

    Otherwise returns (portal, redirect-to-home); `/` renders whatever the
    gate does allow (login, pending, loading, account problem).
    """
    portal = get_portal(request)
    view = await current_view(request)
    if view not in views:
        return portal, redirect("/")
    return portal, None


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303, headers=private_no_store())


def render_page(
    request: Request,
    title: str,
    content: str,
    *,
    with_nav: bool = True,
    status_code: int = 200,
    head_extra: str = "",
) -> HTMLResponse:
    """Wrap `content` in the layout, adding the sidebar for a resolved profile.

    A pending flash message on the portal session is consumed here.
    """
    portal = get_portal(request)
    profile = portal.gate.state.profile if with_nav and portal.gate.view in DASHBOARD_VIEWS else None
    html = Layout(
        title,
        content,
        profile=profile,
        current_path=request.url.path,
        flash=portal.pop_flash(),
        head_extra=head_extra,
    ).render()
    return HTMLResponse(content=html, status_code=status_code, headers=private_no_store())


__all__ = [
    "DASHBOARD_VIEWS",
    "private_no_store",
    "get_portal",
    "current_view",
    "require_view",
    "redirect",
    "render_page",
]
