"""
Pytest configuration for backend tests.

Why: Force AnyIO to use the asyncio backend, keep host environment variables
(Supabase keys, prod flags) out of the suite and provide a seeded in-memory
portal for HTTP tests.
"""
import os
import sys
from pathlib import Path

import httpx
import pytest
from httpx import ASGITransport


# Ensure modules in backend/ are importable across tests
REPO_ROOT = Path(__file__).resolve().parents[2]
BACKEND_DIR = REPO_ROOT / "backend"
TESTS_DIR = BACKEND_DIR / "tests"
for p in (str(BACKEND_DIR), str(TESTS_DIR)):
    if p not in sys.path:
        sys.path.insert(0, p)

_ENV_VARS = (
    "SIAKAD_ENV",
    "SIAKAD_BACKEND",
    "SIAKAD_SEED_DEMO",
    "SIAKAD_TRUST_PROXY",
    "SIAKAD_SESSION_TTL_SECONDS",
    "SIAKAD_ANONYMOUS_SESSION_TTL_SECONDS",
    "SIAKAD_MAX_ANONYMOUS_SESSIONS",
    "SIAKAD_PURGE_FUNCTION",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_SERVICE_ROLE_KEY",
    "ALLOWED_REGISTRATION_DOMAINS",
)

# `web.main` builds a module-level app on import; keep it on the in-memory backend.
for _var in _ENV_VARS:
    os.environ.pop(_var, None)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_siakad_env(monkeypatch: pytest.MonkeyPatch):
    """Tests opt into env-driven behavior explicitly; nothing leaks between them."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def backend():
    """In-memory backend with one approved admin, one approved student and one pending student."""
    from identity_access.domain import AccountStatus, Role
    from identity_access.memory_access import InMemoryBackend

    b = InMemoryBackend()
    b.add_account(
        email="admin@sekolah.sch.id",
        password="admin123",
        full_name="Bu Guru",
        role=Role.TEACHER_ADMIN,
        status=AccountStatus.APPROVED,
    )
    b.add_account(
        email="siswa@sekolah.sch.id",
        password="siswa123",
        full_name="Andi Siswa",
        role=Role.STUDENT,
        status=AccountStatus.APPROVED,
    )
    b.add_account(
        email="baru@sekolah.sch.id",
        password="baru123",
        full_name="Budi Baru",
        role=Role.STUDENT,
        status=AccountStatus.PENDING,
    )
    b.table("courses").extend(
        [
            {"id": "c1", "course_name": "Korespondensi"},
            {"id": "c2", "course_name": "Akuntansi Dasar"},
        ]
    )
    return b


@pytest.fixture
def settings():
    from web.config import Settings

    return Settings()


@pytest.fixture
def app(backend, settings):
    from web.main import create_app

    return create_app(settings=settings, backend=backend)


@pytest.fixture
async def client(app):
    # https so the Secure session cookie is kept by the client's cookie jar.
    async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="https://test") as c:
        yield c
