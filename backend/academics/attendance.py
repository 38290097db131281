"""Daily attendance self-reporting for students."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from identity_access.data_access import DataAccess, Query

from .clock import today_iso
from .errors import AttendanceAlreadyRecorded, ValidationFailure


ATTENDANCE_STATUSES = ("Hadir", "Sakit", "Izin", "Alpa")
HISTORY_LIMIT = 10


@dataclass(frozen=True)
class AttendanceEntry:
    id: str
    date: str
    status: str


@dataclass(frozen=True)
class AttendanceOverview:
    today: str
    today_status: Optional[str]
    history: List[AttendanceEntry]


async def load_attendance(access: DataAccess, user_id: str, *, now: Optional[datetime] = None) -> AttendanceOverview:
    today = today_iso(now)
    record = await access.find_one("attendance", {"user_id": user_id, "date": today})
    rows = await access.select(
        Query(collection="attendance", eq={"user_id": user_id}, order_by="date", descending=True, limit=HISTORY_LIMIT)
    )
    history = [AttendanceEntry(id=str(r.get("id")), date=str(r.get("date")), status=str(r.get("status"))) for r in rows]
    return AttendanceOverview(today=today, today_status=record.get("status") if record else None, history=history)


async def mark_today(access: DataAccess, user_id: str, status: str, *, now: Optional[datetime] = None) -> AttendanceEntry:
    """Record today's attendance once.

    Raises ValidationFailure for an unknown status and AttendanceAlreadyRecorded
    when the user already reported for today.
    """
    if status not in ATTENDANCE_STATUSES:
        raise ValidationFailure("Status absensi tidak dikenal.")
    today = today_iso(now)
    if await access.find_one("attendance", {"user_id": user_id, "date": today}) is not None:
        raise AttendanceAlreadyRecorded()
    row = await access.insert("attendance", {"user_id": user_id, "date": today, "status": status})
    return AttendanceEntry(id=str(row.get("id")), date=today, status=status)


__all__ = [
    "ATTENDANCE_STATUSES",
    "AttendanceEntry",
    "AttendanceOverview",
    "load_attendance",
    "mark_today",
]
