"""
Configuration and startup security checks for SIAKAD.

Why: A school portal handles student data; an accidental insecure deployment
must not start. Settings come from environment variables; the startup guard
enforces minimal production safety without burdening local development.

Permissions: The caller needs no special privileges. `ensure_secure_config_on_startup`
reads the settings and raises `SystemExit` on fatal misconfiguration.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import os


PROD_LIKE = frozenset({"prod", "production", "stage", "staging"})
BACKENDS = frozenset({"supabase", "memory"})
DEFAULT_SESSION_TTL_SECONDS = 8 * 3600
DEFAULT_ANONYMOUS_SESSION_TTL_SECONDS = 15 * 60
DEFAULT_MAX_ANONYMOUS_SESSIONS = 100


def _is_prod_like(env: str) -> bool:
    return (env or "").lower() in PROD_LIKE


def _flag(name: str, default: str = "false") -> bool:
    return (os.getenv(name, default) or "").strip().lower() in ("1", "true", "yes")


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        raise SystemExit(f"Refusing to start: {name} must be an integer.")


def parse_allowed_registration_domains(raw: str | None) -> frozenset[str]:
    """Parse ALLOWED_REGISTRATION_DOMAINS into a normalized set of domains.

    Accepts a comma-separated list like "@sekolah.sch.id, example.org";
    entries are lowercased and always carry a leading '@'. Empty entries are
    ignored so trailing commas are harmless.
    """
    if not raw:
        return frozenset()
    items = set()
    for part in str(raw).split(","):
        item = part.strip().lower()
        if not item:
            continue
        items.add(item if item.startswith("@") else f"@{item}")
    return frozenset(items)


@dataclass(frozen=True)
class Settings:
    environment: str = "dev"
    backend: str = "memory"
    supabase_url: str = ""
    supabase_anon_key: str = ""
    service_role_key: str = ""
    purge_function: str = "delete-user"
    session_ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS
    anonymous_session_ttl_seconds: int = DEFAULT_ANONYMOUS_SESSION_TTL_SECONDS
    max_anonymous_sessions: int = DEFAULT_MAX_ANONYMOUS_SESSIONS
    page_settle_timeout_seconds: float = 3.0
    allowed_registration_domains: frozenset[str] = frozenset()
    seed_demo: bool = False
    trust_proxy: bool = False

    @property
    def is_prod_like(self) -> bool:
        return _is_prod_like(self.environment)


def load_settings() -> Settings:
    """Build Settings from the environment.

    SIAKAD_BACKEND defaults to `supabase` when SUPABASE_URL and
    SUPABASE_ANON_KEY are both set, otherwise to `memory`.
    """
    url = (os.getenv("SUPABASE_URL") or "").strip()
    anon = (os.getenv("SUPABASE_ANON_KEY") or "").strip()
    default_backend = "supabase" if (url and anon) else "memory"
    backend = (os.getenv("SIAKAD_BACKEND") or default_backend).strip().lower()
    if backend not in BACKENDS:
        raise SystemExit(f"Refusing to start: SIAKAD_BACKEND must be one of {sorted(BACKENDS)} (got {backend!r}).")
    ttl = _int_env("SIAKAD_SESSION_TTL_SECONDS", DEFAULT_SESSION_TTL_SECONDS)
    anonymous_ttl = _int_env("SIAKAD_ANONYMOUS_SESSION_TTL_SECONDS", DEFAULT_ANONYMOUS_SESSION_TTL_SECONDS)
    max_anonymous = _int_env("SIAKAD_MAX_ANONYMOUS_SESSIONS", DEFAULT_MAX_ANONYMOUS_SESSIONS)
    return Settings(
        environment=(os.getenv("SIAKAD_ENV", "dev") or "dev").strip().lower(),
        backend=backend,
        supabase_url=url,
        supabase_anon_key=anon,
        service_role_key=(os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "").strip(),
        purge_function=(os.getenv("SIAKAD_PURGE_FUNCTION") or "delete-user").strip(),
        session_ttl_seconds=max(60, ttl),
        anonymous_session_ttl_seconds=max(60, anonymous_ttl),
        max_anonymous_sessions=max(1, max_anonymous),
        allowed_registration_domains=parse_allowed_registration_domains(os.getenv("ALLOWED_REGISTRATION_DOMAINS")),
        seed_demo=_flag("SIAKAD_SEED_DEMO"),
        trust_proxy=_flag("SIAKAD_TRUST_PROXY"),
    )


def ensure_secure_config_on_startup(settings: Optional[Settings] = None) -> None:
    """Fail fast on insecure production configuration.

    Checks (production-like environments only):
    - The in-memory backend is not allowed.
    - SUPABASE_URL must be set and use https.
    - SUPABASE_ANON_KEY must be set and not a placeholder.
    - The browser-session client must not run with the service role key,
      which would bypass row-level policies.
    - Demo seeding must be off.
    """
    settings = settings or load_settings()
    if not settings.is_prod_like:
        return  # dev/test remain permissive

    if settings.backend == "memory":
        raise SystemExit("Refusing to start: SIAKAD_BACKEND=memory is not allowed in production/staging.")

    if not settings.supabase_url:
        raise SystemExit("Refusing to start: SUPABASE_URL is unset in production.")
    if not settings.supabase_url.lower().startswith("https://"):
        raise SystemExit("Refusing to start: SUPABASE_URL must use https in production.")

    anon = settings.supabase_anon_key
    if not anon or anon.upper().startswith(("CHANGE_ME", "DUMMY")):
        raise SystemExit("Refusing to start: SUPABASE_ANON_KEY is unset or a placeholder in production.")

    if settings.service_role_key and anon == settings.service_role_key:
        raise SystemExit(
            "Refusing to start: SUPABASE_ANON_KEY equals the service role key. "
            "Browser sessions must run under row-level policies."
        )

    if settings.seed_demo:
        raise SystemExit("Refusing to start: SIAKAD_SEED_DEMO must be false in production/staging.")


__all__ = [
    "Settings",
    "load_settings",
    "ensure_secure_config_on_startup",
    "parse_allowed_registration_domains",
]
