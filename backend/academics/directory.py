"""User directory for the admin's student/teacher management view."""
from __future__ import annotations

from typing import Iterable, List

from identity_access.data_access import DataAccess, Query
from identity_access.domain import AccountStatus, PROFILES_COLLECTION, Profile


# Pending accounts are handled in the registration view.
LISTED_STATUSES = (AccountStatus.APPROVED.value, AccountStatus.REJECTED.value)


async def list_users(access: DataAccess) -> List[Profile]:
    rows = await access.select(
        Query(collection=PROFILES_COLLECTION, in_={"status": LISTED_STATUSES}, order_by="full_name")
    )
    return [Profile.from_record(r) for r in rows]


def filter_users(users: Iterable[Profile], term: str | None) -> List[Profile]:
    """Case-insensitive match on full name or registration email."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(users)
    return [
        u
        for u in users
        if needle in u.full_name.lower() or needle in (u.pending_email or "").lower()
    ]


__all__ = ["LISTED_STATUSES", "list_users", "filter_users"]
