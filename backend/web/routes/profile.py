"""
Profile routes: view the own account, change display name and password.

Available to both dashboards. After a name change the gate re-resolves the
profile so the sidebar shows the new name immediately.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Form, Request

from academics.errors import ValidationFailure
from academics.profiles import change_password, update_full_name
from identity_access.data_access import AuthFailure, DataAccessError

from ..components.pages import ProfilePage
from ..portal import DASHBOARD_VIEWS, redirect, render_page, require_view
from .security import _is_same_origin, csrf_forbidden


profile_router = APIRouter(tags=["Profile"])
logger = logging.getLogger("siakad.web")


def _page(portal, **errors) -> ProfilePage:
    state = portal.gate.state
    return ProfilePage(state.profile, email=state.principal.email, **errors)


@profile_router.get("/profile")
async def profile(request: Request):
    portal, denied = await require_view(request, *DASHBOARD_VIEWS)
    if denied:
        return denied
    return render_page(request, "Profil", _page(portal).render())


@profile_router.post("/profile")
async def profile_update_name(request: Request, full_name: str = Form("")):
    if not _is_same_origin(request):
        return csrf_forbidden(request)
    portal, denied = await require_view(request, *DASHBOARD_VIEWS)
    if denied:
        return denied
    user_id = portal.gate.state.principal.id
    try:
        await update_full_name(portal.access, user_id, full_name)
    except ValidationFailure as exc:
        return render_page(request, "Profil", _page(portal, name_error=exc.message).render(), status_code=400)
    except DataAccessError as exc:
        logger.warning("Updating name for %s failed: %s", user_id, exc.__class__.__name__)
        portal.flash = "Nama gagal disimpan. Silakan coba lagi."
        return redirect("/profile")
    await portal.gate.refresh()
    portal.flash = "Nama berhasil diperbarui."
    return redirect("/profile")


@profile_router.post("/profile/password")
async def profile_change_password(request: Request, password: str = Form(""), password_confirm: str = Form("")):
    if not _is_same_origin(request):
        return csrf_forbidden(request)
    portal, denied = await require_view(request, *DASHBOARD_VIEWS)
    if denied:
        return denied
    try:
        await change_password(portal.access, password, password_confirm)
    except ValidationFailure as exc:
        return render_page(request, "Profil", _page(portal, password_error=exc.message).render(), status_code=400)
    except AuthFailure as exc:
        logger.info("Password change rejected for %s", portal.gate.state.principal.id)
        return render_page(request, "Profil", _page(portal, password_error=exc.message).render(), status_code=400)
    except DataAccessError as exc:
        logger.warning("Password change failed: %s", exc.__class__.__name__)
        portal.flash = "Password gagal diubah. Silakan coba lagi."
        return redirect("/profile")
    # The credential update may re-emit the principal; let the gate settle first.
    await portal.gate.settle()
    portal.flash = "Password berhasil diubah."
    return redirect("/profile")


__all__ = ["profile_router"]
