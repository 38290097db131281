"""Headline counts for the admin dashboard."""
from __future__ import annotations

from dataclasses import dataclass

from identity_access.data_access import DataAccess, Query
from identity_access.domain import AccountStatus, PROFILES_COLLECTION, Role


@dataclass(frozen=True)
class PortalStats:
    students: int
    teachers: int
    pending: int


async def load_stats(access: DataAccess) -> PortalStats:
    approved = AccountStatus.APPROVED.value
    students = await access.count(
        Query(collection=PROFILES_COLLECTION, eq={"role": Role.STUDENT.value, "status": approved})
    )
    teachers = await access.count(
        Query(collection=PROFILES_COLLECTION, eq={"role": Role.TEACHER_ADMIN.value, "status": approved})
    )
    pending = await access.count(Query(collection=PROFILES_COLLECTION, eq={"status": AccountStatus.PENDING.value}))
    return PortalStats(students=students, teachers=teachers, pending=pending)


__all__ = ["PortalStats", "load_stats"]
