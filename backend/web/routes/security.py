"""
Shared web security helpers for the form-posting routes.

Every state-changing route (login, logout, approvals, attendance, profile
edits) runs the same same-origin check. Keeping a single implementation
avoids drift between routers.
"""
from __future__ import annotations

from urllib.parse import urlparse
import logging

from fastapi import Request
from fastapi.responses import PlainTextResponse


logger = logging.getLogger("siakad.web")


def _default_port(scheme: str) -> int:
    return 443 if scheme == "https" else 80


def _parse_origin(url: str) -> tuple[str, str, int]:
    p = urlparse(url)
    if not p.scheme or not p.hostname:
        raise ValueError("invalid_origin")
    scheme = p.scheme.lower()
    port = p.port if p.port is not None else _default_port(scheme)
    return scheme, p.hostname.lower(), int(port)


def _trust_proxy(request: Request) -> bool:
    return bool(request.app.state.settings.trust_proxy)


def _server_origin(request: Request) -> tuple[str, str, int]:
    if _trust_proxy(request):
        proto = (request.headers.get("x-forwarded-proto") or request.url.scheme or "http").split(",")[0].strip()
        raw_host = (request.headers.get("x-forwarded-host") or request.headers.get("host") or "").split(",")[0].strip()
        scheme = (proto or "http").lower()
        if ":" in raw_host:
            host, port_str = raw_host.rsplit(":", 1)
            port = int(port_str) if port_str.isdigit() else _default_port(scheme)
        else:
            host = raw_host or (request.url.hostname or "")
            port = _default_port(scheme)
        xf_port = (request.headers.get("x-forwarded-port") or "").split(",")[0].strip()
        if xf_port.isdigit():
            port = int(xf_port)
        return scheme, host.lower(), port

    scheme = (request.url.scheme or "http").lower()
    host = (request.url.hostname or "").lower()
    port = int(request.url.port) if request.url.port else _default_port(scheme)
    return scheme, host, port


def _is_same_origin(request: Request) -> bool:
    """Verify same-origin using Origin or Referer headers.

    Behavior:
    - If Origin is present, require exact scheme/host/port match with server.
    - Else if Referer is present, validate its origin similarly.
    - Else (no headers): allow, so non-browser clients keep working.
    Proxy awareness: X-Forwarded-* is only trusted when SIAKAD_TRUST_PROXY=true.
    """
    candidate = request.headers.get("origin") or request.headers.get("referer")
    if not candidate:
        return True
    try:
        return _parse_origin(candidate) == _server_origin(request)
    except ValueError:
        return False


def csrf_forbidden(request: Request) -> PlainTextResponse:
    logger.warning("Cross-origin POST rejected on %s", request.url.path)
    return PlainTextResponse("csrf_violation", status_code=403, headers={"Cache-Control": "private, no-store"})


__all__ = ["_is_same_origin", "csrf_forbidden"]
