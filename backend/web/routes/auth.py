"""
Authentication routes: login, registration and logout (server-rendered forms).

Why:
    Credentials are posted to the portal, which forwards them to the identity
    backend through the browsing context's own data access handle. The gate
    then observes the identity change and resolves the profile; these routes
    never decide on dashboards themselves.

Security:
    - All POSTs require a same-origin request (CSRF defense).
    - The portal session id is rotated after a successful sign-in.
    - Passwords are never logged or echoed back into forms.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Form, Request

from identity_access.data_access import AuthFailure, Credentials, DataAccessError
from identity_access.domain import Role, parse_role
from identity_access.gate import PrincipalChanged, View

from ..components.pages import LoginPage, RegistrationPage
from ..portal import current_view, get_portal, redirect, render_page
from .security import _is_same_origin, csrf_forbidden


auth_router = APIRouter(tags=["Auth"])
logger = logging.getLogger("siakad.web.auth")

MIN_PASSWORD_LENGTH = 6

# Backend messages mapped to the portal's language; unknown ones pass through.
_AUTH_MESSAGES = {
    "invalid login credentials": "Email atau password salah.",
    "email not confirmed": "Email belum dikonfirmasi. Silakan cek kotak masuk Anda.",
    "user already registered": "Email sudah terdaftar. Silakan masuk.",
}


def _user_message(exc: AuthFailure) -> str:
    return _AUTH_MESSAGES.get((exc.message or "").strip().lower(), exc.message or "Permintaan ditolak.")


def _is_allowed_registration_email(email: str, allowed_domains: frozenset[str]) -> bool:
    """Return True if the email's domain is in `allowed_domains`.

    An empty allow-list means no restriction. Emails without a local part or
    domain are treated as disallowed.
    """
    if not allowed_domains:
        return True
    normalized = (email or "").strip().lower()
    if "@" not in normalized:
        return False
    local, domain = normalized.rsplit("@", 1)
    if not local or not domain:
        return False
    return f"@{domain}" in allowed_domains


def _registration_domain_error(allowed_domains: frozenset[str]) -> str:
    return "Pendaftaran hanya untuk email dengan domain: " + ", ".join(sorted(allowed_domains))


@auth_router.get("/auth/login")
async def auth_login(request: Request):
    if await current_view(request) is not View.LOGIN:
        return redirect("/")
    return render_page(request, "Masuk", LoginPage().render(), with_nav=False)


@auth_router.post("/auth/login")
async def auth_login_submit(request: Request, email: str = Form(""), password: str = Form("")):
    if not _is_same_origin(request):
        return csrf_forbidden(request)
    portal = get_portal(request)
    email = email.strip()
    if not email or not password:
        page = LoginPage(email=email, error="Email dan password wajib diisi.")
        return render_page(request, "Masuk", page.render(), with_nav=False, status_code=400)

    try:
        principal = await portal.access.sign_in(Credentials(email=email, password=password))
    except AuthFailure as exc:
        logger.info("Sign-in rejected: %s", exc.message)
        page = LoginPage(email=email, error=_user_message(exc))
        return render_page(request, "Masuk", page.render(), with_nav=False, status_code=400)
    except DataAccessError as exc:
        logger.warning("Sign-in failed: %s: %s", exc.__class__.__name__, str(exc))
        page = LoginPage(email=email, error="Layanan sedang tidak tersedia. Silakan coba lagi.")
        return render_page(request, "Masuk", page.render(), with_nav=False, status_code=503)

    state = portal.gate.state
    if state.principal is None or state.principal.id != principal.id:
        # Backends that do not emit a change notification for sign-in.
        portal.gate.dispatch(PrincipalChanged(principal))
    await portal.gate.settle()
    request.app.state.sessions.rotate(portal.session_id)
    logger.info("Signed in %s", principal.id)
    return redirect("/")


@auth_router.get("/auth/register")
async def auth_register(request: Request):
    if await current_view(request) is not View.LOGIN:
        return redirect("/")
    settings = request.app.state.settings
    page = RegistrationPage(allowed_domains=tuple(sorted(settings.allowed_registration_domains)))
    return render_page(request, "Daftar", page.render(), with_nav=False)


@auth_router.post("/auth/register")
async def auth_register_submit(
    request: Request,
    full_name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    role: str = Form(Role.STUDENT.value),
):
    """Create a pending account.

    Behavior:
        - Validates name, email (against ALLOWED_REGISTRATION_DOMAINS), password
          length and role before contacting the backend.
        - The backend stores the profile with status `pending`; the account
          stays on the pending-approval page until a teacher/admin approves it.
    """
    if not _is_same_origin(request):
        return csrf_forbidden(request)
    portal = get_portal(request)
    allowed = request.app.state.settings.allowed_registration_domains
    values = {"full_name": full_name.strip(), "email": email.strip(), "role": role}

    def _fail(message: str, status_code: int = 400):
        page = RegistrationPage(values=values, error=message, allowed_domains=tuple(sorted(allowed)))
        return render_page(request, "Daftar", page.render(), with_nav=False, status_code=status_code)

    parsed_role = parse_role(role)
    if not values["full_name"]:
        return _fail("Nama lengkap wajib diisi.")
    if "@" not in values["email"]:
        return _fail("Alamat email tidak valid.")
    if not _is_allowed_registration_email(values["email"], allowed):
        return _fail(_registration_domain_error(allowed))
    if len(password) < MIN_PASSWORD_LENGTH:
        return _fail("Password minimal harus 6 karakter.")
    if parsed_role is None:
        return _fail("Peran tidak dikenal.")

    try:
        result = await portal.access.sign_up(
            Credentials(email=values["email"], password=password),
            {"full_name": values["full_name"], "role": parsed_role.value},
        )
    except AuthFailure as exc:
        logger.info("Sign-up rejected: %s", exc.message)
        return _fail(_user_message(exc))
    except DataAccessError as exc:
        logger.warning("Sign-up failed: %s: %s", exc.__class__.__name__, str(exc))
        return _fail("Layanan sedang tidak tersedia. Silakan coba lagi.", status_code=503)

    if result.already_registered:
        return _fail("Email sudah terdaftar. Silakan masuk.")

    logger.info("Registered %s as %s (pending)", result.user_id, parsed_role.value)
    portal.flash = "Pendaftaran berhasil! Akun Anda menunggu persetujuan Guru/Admin."
    return redirect("/auth/login")


@auth_router.post("/auth/logout")
async def auth_logout(request: Request):
    """Sign out the browsing context.

    Local state is cleared first; a backend sign-out fault is logged by the
    gate and never blocks the logout. Repeating the request is harmless.
    """
    if not _is_same_origin(request):
        return csrf_forbidden(request)
    portal = get_portal(request)
    await portal.gate.logout()
    portal.flash = "Anda telah keluar."
    return redirect("/")


__all__ = ["auth_router"]
