"""
Registration approval and user removal.

Why:
    New accounts start as `pending` (set by the sign-up trigger). Teachers and
    admins approve or reject them from the admin dashboard.

Removal contract:
    1. Delete the profile record under the admin's session. This is immediate
       and guaranteed; without a profile the gate signs the account out.
    2. Hand the id to an `IdentityPurger` for eventual removal of the identity
       itself. Failures there are logged only.
"""
from __future__ import annotations

from typing import List
import logging

from identity_access.data_access import DataAccess, Query
from identity_access.domain import AccountStatus, PROFILES_COLLECTION, Profile
from identity_access.purge import IdentityPurger, NullIdentityPurger


logger = logging.getLogger("siakad.academics")


async def list_pending(access: DataAccess) -> List[Profile]:
    rows = await access.select(Query(collection=PROFILES_COLLECTION, eq={"status": AccountStatus.PENDING.value}))
    return [Profile.from_record(r) for r in rows]


async def _set_status(access: DataAccess, user_id: str, status: AccountStatus) -> bool:
    rows = await access.update(PROFILES_COLLECTION, {"id": user_id}, {"status": status.value})
    if rows:
        logger.info("Profile %s set to %s", user_id, status.value)
    return bool(rows)


async def approve(access: DataAccess, user_id: str) -> bool:
    """Approve a registration. Returns False when no profile matched."""
    return await _set_status(access, user_id, AccountStatus.APPROVED)


async def reject(access: DataAccess, user_id: str) -> bool:
    """Reject a registration. The account keeps its profile with status `rejected`."""
    return await _set_status(access, user_id, AccountStatus.REJECTED)


class UserRemoval:
    def __init__(self, purger: IdentityPurger | None = None) -> None:
        self._purger = purger or NullIdentityPurger()

    async def remove(self, access: DataAccess, user_id: str) -> bool:
        """Delete the profile, then request the identity purge.

        Returns False when no profile matched (nothing is purged then).
        Raises DataAccessError when the profile deletion itself fails.
        """
        removed = await access.delete(PROFILES_COLLECTION, {"id": user_id})
        if not removed:
            return False
        logger.info("Profile %s deleted", user_id)
        try:
            await self._purger.purge_identity(user_id)
        except Exception as exc:
            logger.warning("Identity purge for %s failed: %s", user_id, exc.__class__.__name__)
        return True


__all__ = ["list_pending", "approve", "reject", "UserRemoval"]
