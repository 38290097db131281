"""
Identity domain types: principals, profiles, roles and account status.

Why:
- Centralize the closed sets of roles and statuses so the gate, the services
  and the web layer agree on what a "recognized" account is.
- Keep stored values (Indonesian labels written by the sign-up trigger)
  separate from how the code refers to them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional


PROFILES_COLLECTION = "profiles"


class Role(str, Enum):
    """Roles a profile can carry. Values are the stored column values."""

    STUDENT = "Siswa"
    TEACHER_ADMIN = "Guru/Admin"


class AccountStatus(str, Enum):
    """Approval status of a profile. Values are the stored column values."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# English labels are accepted as aliases of the stored role values.
_ROLE_ALIASES = {
    "siswa": Role.STUDENT,
    "student": Role.STUDENT,
    "guru/admin": Role.TEACHER_ADMIN,
    "teacher/admin": Role.TEACHER_ADMIN,
}


def parse_role(raw: Any) -> Optional[Role]:
    """Return the Role for a stored value, or None when unrecognized."""
    if not isinstance(raw, str):
        return None
    return _ROLE_ALIASES.get(raw.strip().lower())


def parse_status(raw: Any) -> Optional[AccountStatus]:
    """Return the AccountStatus for a stored value (case-insensitive), or None."""
    if not isinstance(raw, str):
        return None
    try:
        return AccountStatus(raw.strip().lower())
    except ValueError:
        return None


@dataclass(frozen=True)
class Principal:
    """Authenticated identity issued by the identity backend."""

    id: str
    email: Optional[str] = None
    expires_at: Optional[int] = None


@dataclass(frozen=True)
class Profile:
    """Application-level record describing a principal.

    `role` and `status` are None when the stored value is not part of the
    closed set; the raw values are kept for display.
    """

    id: str
    full_name: str
    role: Optional[Role]
    status: Optional[AccountStatus]
    raw_role: Optional[str] = None
    raw_status: Optional[str] = None
    pending_email: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Profile":
        raw_role = record.get("role")
        raw_status = record.get("status")
        return cls(
            id=str(record.get("id", "")),
            full_name=str(record.get("full_name") or ""),
            role=parse_role(raw_role),
            status=parse_status(raw_status),
            raw_role=raw_role if isinstance(raw_role, str) else None,
            raw_status=raw_status if isinstance(raw_status, str) else None,
            pending_email=record.get("pending_email"),
        )

    @property
    def role_label(self) -> str:
        if self.role is Role.STUDENT:
            return "Siswa"
        if self.role is Role.TEACHER_ADMIN:
            return "Guru / Admin"
        return self.raw_role or "-"


__all__ = [
    "PROFILES_COLLECTION",
    "Role",
    "AccountStatus",
    "parse_role",
    "parse_status",
    "Principal",
    "Profile",
]
