"""Course materials for the student dashboard."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from identity_access.data_access import DataAccess, Query


ALL_COURSES = "all"


@dataclass(frozen=True)
class Course:
    id: str
    course_name: str


@dataclass(frozen=True)
class Material:
    id: str
    title: str
    description: Optional[str]
    file_url: Optional[str]
    module: Optional[str]
    course_id: str
    course_name: str


async def load_courses(access: DataAccess) -> List[Course]:
    rows = await access.select(Query(collection="courses", order_by="course_name"))
    return [Course(id=str(r.get("id")), course_name=str(r.get("course_name") or "")) for r in rows]


def course_name_map(courses: Iterable[Course]) -> Dict[str, str]:
    return {c.id: c.course_name for c in courses}


def _material(row: Dict[str, Any], names: Dict[str, str]) -> Material:
    course_id = str(row.get("course_id") or "")
    return Material(
        id=str(row.get("id")),
        title=str(row.get("title") or ""),
        description=row.get("description"),
        file_url=row.get("file_url"),
        module=row.get("module"),
        course_id=course_id,
        course_name=names.get(course_id, "-"),
    )


async def load_catalog(access: DataAccess) -> tuple[List[Course], List[Material]]:
    """Return all courses and all materials joined with their course name."""
    courses = await load_courses(access)
    names = course_name_map(courses)
    rows = await access.select(Query(collection="materials", order_by="title"))
    return courses, [_material(r, names) for r in rows]


def filter_materials(materials: Iterable[Material], *, course_id: str | None, term: str | None) -> List[Material]:
    """Filter by course (`all` or empty = any) and by a search term on title/description."""
    needle = (term or "").strip().lower()
    result = []
    for m in materials:
        if course_id and course_id != ALL_COURSES and m.course_id != course_id:
            continue
        if needle and needle not in m.title.lower() and needle not in (m.description or "").lower():
            continue
        result.append(m)
    return result


__all__ = [
    "ALL_COURSES",
    "Course",
    "Material",
    "load_courses",
    "course_name_map",
    "load_catalog",
    "filter_materials",
]
