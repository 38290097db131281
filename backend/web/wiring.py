"""
Backend and purge-adapter wiring from settings.

Why:
    `create_app` should not know how a Supabase client or the in-memory store is
    built. This module turns `Settings` into the concrete adapters once, at
    application construction.

Security:
    Browser sessions only ever receive a client built with the anon key. The
    service role key is handed exclusively to the server-side purge adapter.
"""
from __future__ import annotations

import logging

from identity_access.data_access import Backend
from identity_access.memory_access import InMemoryBackend, seed_demo_accounts
from identity_access.purge import EdgeFunctionPurger, IdentityPurger, NullIdentityPurger
from identity_access.supabase_access import SupabaseBackend

from .config import Settings


logger = logging.getLogger("siakad.web")


def build_backend(settings: Settings) -> Backend:
    """Return the backend selected by SIAKAD_BACKEND.

    The Supabase backend creates clients lazily (one per browsing context), so
    building it never touches the network.
    """
    if settings.backend == "supabase":
        if not settings.supabase_url or not settings.supabase_anon_key:
            raise SystemExit("Refusing to start: SIAKAD_BACKEND=supabase needs SUPABASE_URL and SUPABASE_ANON_KEY.")
        logger.info("Backend wired: Supabase at %s", settings.supabase_url)
        return SupabaseBackend(settings.supabase_url, settings.supabase_anon_key)

    backend = InMemoryBackend()
    if settings.seed_demo:
        seed_demo_accounts(backend)
        logger.info("Demo accounts seeded (admin@siakad.local, siswa@siakad.local)")
    logger.warning("Backend wired: in-memory (data is lost on restart)")
    return backend


def build_purger(settings: Settings, backend: Backend) -> IdentityPurger:
    """Pick the adapter for the second phase of user removal.

    - In-memory backend: it purges its own accounts.
    - Supabase with a service role key: call the configured edge function.
    - Otherwise: log only (identity removed manually in the Supabase panel).
    """
    if isinstance(backend, InMemoryBackend):
        return backend
    if settings.supabase_url and settings.service_role_key:
        logger.info("Identity purge wired: edge function %s", settings.purge_function)
        return EdgeFunctionPurger(
            base_url=settings.supabase_url,
            service_key=settings.service_role_key,
            function=settings.purge_function,
        )
    logger.info("Identity purge not configured (SUPABASE_SERVICE_ROLE_KEY unset)")
    return NullIdentityPurger()


__all__ = ["build_backend", "build_purger"]
