"""
SIAKAD web application (FastAPI, server-rendered).

Why:
    One ASGI app serves the login/registration flow and the role-gated student
    and teacher/admin dashboards. Each browser gets a portal session holding
    its own data access handle and authorization gate; pages only ever render
    what the gate's current view decision allows.

Lifecycle:
    `create_app()` builds the backend once and keeps it on `app.state`. The
    lifespan shutdown closes every portal session and then the backend.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
import logging
import os
import sys

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from academics.analytics import load_stats
from academics.registrations import UserRemoval
from academics.student_home import load_home
from identity_access.data_access import Backend, DataAccessError
from identity_access.gate import View
from identity_access.purge import IdentityPurger
from identity_access.stores import PortalSessionStore

from .auth_utils import SESSION_COOKIE_NAME, set_session_cookie
from .components import Layout
from .components.pages import (
    AccountProblemPage,
    AdminHomePage,
    LoadingPage,
    LoginPage,
    PendingApprovalPage,
    ServiceUnavailablePage,
    StudentHomePage,
)
from .config import Settings, ensure_secure_config_on_startup, load_settings
from .portal import get_portal, private_no_store, render_page
from .routes.admin import admin_router
from .routes.auth import auth_router
from .routes.profile import profile_router
from .routes.student import student_router
from .wiring import build_backend, build_purger


logger = logging.getLogger("siakad.web")

STATIC_DIR = Path(__file__).parent / "static"


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating the test env.
    - Allow explicit opt-out via SIAKAD_ENABLE_DOTENV (default true outside pytest).
    """
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("SIAKAD_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


if _should_load_dotenv():
    load_dotenv()


def _is_session_free_path(path: str) -> bool:
    return path.startswith("/static/") or path in ("/health", "/favicon.ico")


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    await app.state.sessions.close_all()
    await app.state.backend.aclose()
    logger.info("Portal sessions and backend closed")


async def portal_session(request: Request, call_next):
    """Attach the browser's portal session, creating one on first contact.

    The cookie is (re)issued whenever the session id differs from the one the
    browser sent: on first contact, after expiry and after rotation at sign-in.
    """
    if _is_session_free_path(request.url.path):
        return await call_next(request)

    app = request.app
    store: PortalSessionStore = app.state.sessions
    sid = request.cookies.get(SESSION_COOKIE_NAME)
    portal = await store.get(sid) if sid else None
    if portal is None:
        try:
            portal = await store.create(app.state.backend)
        except DataAccessError as exc:
            logger.warning("Opening a portal session failed: %s: %s", exc.__class__.__name__, str(exc))
            html = Layout("Layanan Tidak Tersedia", ServiceUnavailablePage().render()).render()
            return HTMLResponse(html, status_code=503, headers=private_no_store())
    request.state.portal = portal

    response = await call_next(request)
    if portal.session_id != sid:
        settings: Settings = app.state.settings
        set_session_cookie(
            response,
            portal.session_id,
            environment=settings.environment,
            max_age=settings.session_ttl_seconds,
        )
    response.headers.setdefault("Cache-Control", "private, no-store")
    return response


async def security_headers(request: Request, call_next):
    response = await call_next(request)
    # No inline scripts or styles anywhere; everything is served from /static.
    csp = (
        "default-src 'self'; script-src 'self'; style-src 'self'; img-src 'self' data:; "
        "font-src 'self' data:; connect-src 'self'; frame-ancestors 'self'; form-action 'self'"
    )
    response.headers.setdefault("Content-Security-Policy", csp)
    response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    # Support the Referer fallback of the same-origin check without leaking paths cross-site.
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    # HSTS: always on (dev = prod)
    response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
    return response


async def home(request: Request):
    """Render whatever the gate currently allows for this browsing context."""
    portal = get_portal(request)
    settings: Settings = request.app.state.settings
    # Bounded: a slow profile lookup renders the self-refreshing loading page.
    state = await portal.gate.settle(timeout=settings.page_settle_timeout_seconds)
    view = portal.gate.view

    if view is View.LOADING:
        page = LoadingPage(target="/")
        return render_page(request, "Memuat", page.render(), with_nav=False, head_extra=page.head_extra())
    if view is View.LOGIN:
        return render_page(request, "Masuk", LoginPage().render(), with_nav=False)
    if view is View.PENDING_APPROVAL:
        return render_page(request, "Menunggu Persetujuan", PendingApprovalPage(state.profile).render(), with_nav=False)
    if view is View.STUDENT_DASHBOARD:
        try:
            page = StudentHomePage(state.profile, await load_home(portal.access, state.principal.id))
        except DataAccessError as exc:
            logger.warning("Loading student home failed: %s", exc.__class__.__name__)
            page = StudentHomePage(state.profile, None)
        return render_page(request, "Dashboard", page.render())
    if view is View.ADMIN_DASHBOARD:
        try:
            page = AdminHomePage(state.profile, await load_stats(portal.access))
        except DataAccessError as exc:
            logger.warning("Loading portal statistics failed: %s", exc.__class__.__name__)
            page = AdminHomePage(state.profile, None)
        return render_page(request, "Dashboard", page.render())
    return render_page(request, "Terjadi Masalah", AccountProblemPage().render(), with_nav=False)


async def health_check():
    # Minimal health endpoint for orchestrators; never cached.
    return JSONResponse({"status": "ok"}, headers={"Cache-Control": "private, no-store"})


def create_app(
    *,
    settings: Optional[Settings] = None,
    backend: Optional[Backend] = None,
    purger: Optional[IdentityPurger] = None,
) -> FastAPI:
    """Build the ASGI app.

    Parameters:
        settings: Defaults to `load_settings()` (environment variables).
        backend: Defaults to the backend selected by the settings.
        purger: Identity purge adapter; defaults to the one matching the backend.

    Raises SystemExit on insecure production configuration.
    """
    settings = settings or load_settings()
    ensure_secure_config_on_startup(settings)
    backend = backend if backend is not None else build_backend(settings)

    app = FastAPI(
        title="SIAKAD",
        description="Sistem Informasi Akademik",
        version="0.1.0",
        lifespan=_lifespan,
    )
    app.state.settings = settings
    app.state.backend = backend
    app.state.sessions = PortalSessionStore(
        ttl_seconds=settings.session_ttl_seconds,
        anonymous_ttl_seconds=settings.anonymous_session_ttl_seconds,
        max_anonymous=settings.max_anonymous_sessions,
    )
    app.state.user_removal = UserRemoval(purger if purger is not None else build_purger(settings, backend))

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(auth_router)
    app.include_router(student_router)
    app.include_router(admin_router)
    app.include_router(profile_router)
    app.add_api_route("/", home, methods=["GET"], response_class=HTMLResponse, include_in_schema=False)
    app.add_api_route("/health", health_check, methods=["GET"])

    # Last added runs outermost: security headers wrap every response.
    app.middleware("http")(portal_session)
    app.middleware("http")(security_headers)
    return app


app = create_app()
