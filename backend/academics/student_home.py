"""Student dashboard home: upcoming work, news and unread notifications."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
import math

from identity_access.data_access import DataAccess, Query
from identity_access.domain import PROFILES_COLLECTION

from .clock import parse_timestamp, utcnow
from .materials import course_name_map, load_courses


UPCOMING_LIMIT = 3
ANNOUNCEMENT_LIMIT = 3


@dataclass(frozen=True)
class UpcomingAssignment:
    id: str
    title: str
    course_name: str
    due_date: str
    days_left_label: str


@dataclass(frozen=True)
class Announcement:
    id: str
    title: str
    content: str
    author_name: str
    created_at: str


@dataclass(frozen=True)
class StudentHome:
    upcoming: List[UpcomingAssignment]
    announcements: List[Announcement]
    unread_notifications: int


def days_left_label(due_date: object, now: Optional[datetime] = None) -> str:
    """Human label for the time left until `due_date` (whole days, rounded up)."""
    due = parse_timestamp(due_date)
    if due is None:
        return ""
    delta = due - (now or utcnow())
    days = math.ceil(delta.total_seconds() / 86400)
    if days <= 0:
        return "Batas waktu hari ini"
    return f"{days} Hari Lagi"


async def load_home(access: DataAccess, user_id: str, *, now: Optional[datetime] = None) -> StudentHome:
    now = now or utcnow()
    names = course_name_map(await load_courses(access))

    assignment_rows = await access.select(
        Query(
            collection="assignments",
            gt={"due_date": now.isoformat()},
            order_by="due_date",
            limit=UPCOMING_LIMIT,
        )
    )
    upcoming = [
        UpcomingAssignment(
            id=str(r.get("id")),
            title=str(r.get("title") or ""),
            course_name=names.get(str(r.get("course_id") or ""), "-"),
            due_date=str(r.get("due_date") or ""),
            days_left_label=days_left_label(r.get("due_date"), now),
        )
        for r in assignment_rows
    ]

    announcement_rows = await access.select(
        Query(collection="announcements", order_by="created_at", descending=True, limit=ANNOUNCEMENT_LIMIT)
    )
    author_ids = sorted({str(r.get("author_id")) for r in announcement_rows if r.get("author_id")})
    authors = {}
    if author_ids:
        for p in await access.select(Query(collection=PROFILES_COLLECTION, in_={"id": author_ids})):
            authors[str(p.get("id"))] = str(p.get("full_name") or "")
    announcements = [
        Announcement(
            id=str(r.get("id")),
            title=str(r.get("title") or ""),
            content=str(r.get("content") or ""),
            author_name=authors.get(str(r.get("author_id")), "Admin"),
            created_at=str(r.get("created_at") or ""),
        )
        for r in announcement_rows
    ]

    unread = await access.count(Query(collection="notifications", eq={"user_id": user_id, "is_read": False}))
    return StudentHome(upcoming=upcoming, announcements=announcements, unread_notifications=unread)


__all__ = [
    "UpcomingAssignment",
    "Announcement",
    "StudentHome",
    "days_left_label",
    "load_home",
]
