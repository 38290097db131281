"""
Teacher/admin routes: registration approvals and user management.

All pages require the Admin Dashboard decision of the gate. Writes run under
the admin's own session, so the backend's row-level policies still decide
whether they are permitted.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from academics import registrations
from academics.directory import filter_users, list_users
from identity_access.data_access import DataAccessError
from identity_access.gate import View

from ..components.pages import RegistrationsPage, UsersPage
from ..portal import redirect, render_page, require_view
from .security import _is_same_origin, csrf_forbidden


admin_router = APIRouter(tags=["Admin"])
logger = logging.getLogger("siakad.web")

LOAD_ERROR = "Data tidak dapat dimuat. Silakan coba lagi."
WRITE_ERROR = "Perubahan gagal disimpan. Silakan coba lagi."


@admin_router.get("/admin/registrations")
async def admin_registrations(request: Request):
    portal, denied = await require_view(request, View.ADMIN_DASHBOARD)
    if denied:
        return denied
    try:
        pending = await registrations.list_pending(portal.access)
    except DataAccessError as exc:
        logger.warning("Loading registrations failed: %s", exc.__class__.__name__)
        page = RegistrationsPage(None, error=LOAD_ERROR)
    else:
        page = RegistrationsPage(pending)
    return render_page(request, "Manajemen Pendaftaran", page.render())


async def _decide(request: Request, user_id: str, *, approve: bool):
    if not _is_same_origin(request):
        return csrf_forbidden(request)
    portal, denied = await require_view(request, View.ADMIN_DASHBOARD)
    if denied:
        return denied
    action = registrations.approve if approve else registrations.reject
    try:
        changed = await action(portal.access, user_id)
    except DataAccessError as exc:
        logger.warning("Registration decision failed for %s: %s", user_id, exc.__class__.__name__)
        portal.flash = WRITE_ERROR
    else:
        if not changed:
            portal.flash = "Pendaftaran tidak ditemukan."
        else:
            portal.flash = "Pendaftaran disetujui." if approve else "Pendaftaran ditolak."
    return redirect("/admin/registrations")


@admin_router.post("/admin/registrations/{user_id}/approve")
async def admin_registration_approve(request: Request, user_id: str):
    return await _decide(request, user_id, approve=True)


@admin_router.post("/admin/registrations/{user_id}/reject")
async def admin_registration_reject(request: Request, user_id: str):
    return await _decide(request, user_id, approve=False)


@admin_router.get("/admin/users")
async def admin_users(request: Request, q: str = ""):
    portal, denied = await require_view(request, View.ADMIN_DASHBOARD)
    if denied:
        return denied
    try:
        users = await list_users(portal.access)
    except DataAccessError as exc:
        logger.warning("Loading users failed: %s", exc.__class__.__name__)
        page = UsersPage(None, term=q, error=LOAD_ERROR)
    else:
        page = UsersPage(filter_users(users, q), term=q)
    return render_page(request, "Manajemen Pengguna", page.render())


@admin_router.post("/admin/users/{user_id}/delete")
async def admin_user_delete(request: Request, user_id: str):
    """Remove a user: delete the profile now, purge the identity eventually."""
    if not _is_same_origin(request):
        return csrf_forbidden(request)
    portal, denied = await require_view(request, View.ADMIN_DASHBOARD)
    if denied:
        return denied
    if user_id == portal.gate.state.principal.id:
        portal.flash = "Anda tidak dapat menghapus akun Anda sendiri."
        return redirect("/admin/users")
    try:
        removed = await request.app.state.user_removal.remove(portal.access, user_id)
    except DataAccessError as exc:
        logger.warning("Removing user %s failed: %s", user_id, exc.__class__.__name__)
        portal.flash = WRITE_ERROR
    else:
        portal.flash = "Pengguna dihapus." if removed else "Pengguna tidak ditemukan."
    return redirect("/admin/users")


__all__ = ["admin_router"]
