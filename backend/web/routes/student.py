"""
Student dashboard routes: materials, assignments and attendance.

All pages require the Student Dashboard decision of the gate; any other
decision redirects to `/`. Service faults are rendered as on-page messages.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Form, Request

from academics import attendance as attendance_service
from academics.assignments import load_assignments
from academics.errors import ValidationFailure
from academics.materials import ALL_COURSES, filter_materials, load_catalog
from identity_access.data_access import DataAccessError
from identity_access.gate import View

from ..components.pages import AssignmentsPage, AttendancePage, MaterialsPage
from ..portal import redirect, render_page, require_view
from .security import _is_same_origin, csrf_forbidden


student_router = APIRouter(tags=["Student"])
logger = logging.getLogger("siakad.web")

LOAD_ERROR = "Data tidak dapat dimuat. Silakan coba lagi."


@student_router.get("/student/materials")
async def student_materials(request: Request, course: str = ALL_COURSES, q: str = ""):
    portal, denied = await require_view(request, View.STUDENT_DASHBOARD)
    if denied:
        return denied
    try:
        courses, materials = await load_catalog(portal.access)
    except DataAccessError as exc:
        logger.warning("Loading materials failed: %s", exc.__class__.__name__)
        page = MaterialsPage([], [], course_id=course, term=q, error=LOAD_ERROR)
    else:
        page = MaterialsPage(
            courses,
            filter_materials(materials, course_id=course, term=q),
            course_id=course,
            term=q,
        )
    return render_page(request, "Materi Pelajaran", page.render())


@student_router.get("/student/assignments")
async def student_assignments(request: Request, tab: str = "active"):
    portal, denied = await require_view(request, View.STUDENT_DASHBOARD)
    if denied:
        return denied
    user_id = portal.gate.state.principal.id
    try:
        overview = await load_assignments(portal.access, user_id)
    except DataAccessError as exc:
        logger.warning("Loading assignments failed: %s", exc.__class__.__name__)
        page = AssignmentsPage(None, tab=tab, error=LOAD_ERROR)
    else:
        page = AssignmentsPage(overview, tab=tab)
    return render_page(request, "Tugas", page.render())


@student_router.get("/student/attendance")
async def student_attendance(request: Request):
    portal, denied = await require_view(request, View.STUDENT_DASHBOARD)
    if denied:
        return denied
    try:
        overview = await attendance_service.load_attendance(portal.access, portal.gate.state.principal.id)
    except DataAccessError as exc:
        logger.warning("Loading attendance failed: %s", exc.__class__.__name__)
        page = AttendancePage(None, error=LOAD_ERROR)
    else:
        page = AttendancePage(overview)
    return render_page(request, "Absensi", page.render())


@student_router.post("/student/attendance")
async def student_attendance_submit(request: Request, status: str = Form("")):
    """Mark today's attendance once; a second mark shows a message instead."""
    if not _is_same_origin(request):
        return csrf_forbidden(request)
    portal, denied = await require_view(request, View.STUDENT_DASHBOARD)
    if denied:
        return denied
    user_id = portal.gate.state.principal.id
    try:
        entry = await attendance_service.mark_today(portal.access, user_id, status)
    except ValidationFailure as exc:
        portal.flash = exc.message
    except DataAccessError as exc:
        logger.warning("Recording attendance failed: %s", exc.__class__.__name__)
        portal.flash = "Absensi gagal disimpan. Silakan coba lagi."
    else:
        logger.info("Attendance %s recorded for %s", entry.status, user_id)
        portal.flash = f"Absensi hari ini tercatat: {entry.status}."
    return redirect("/student/attendance")


__all__ = ["student_router"]
