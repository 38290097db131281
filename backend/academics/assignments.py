"""Assignments for a student: what is still open and what was handed in."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from identity_access.data_access import DataAccess, Query

from .materials import course_name_map, load_courses


@dataclass(frozen=True)
class ActiveAssignment:
    id: str
    title: str
    description: str
    course_name: str
    due_date: str


@dataclass(frozen=True)
class SubmittedAssignment:
    submission_id: str
    assignment_id: str
    title: str
    course_name: str
    submitted_at: str
    grade: Optional[float]
    feedback: Optional[str]

    @property
    def status_label(self) -> str:
        return "Dinilai" if self.grade is not None else "Menunggu penilaian"


@dataclass(frozen=True)
class AssignmentOverview:
    active: List[ActiveAssignment]
    history: List[SubmittedAssignment]


async def load_assignments(access: DataAccess, user_id: str) -> AssignmentOverview:
    """Split assignments into active (no submission yet) and history.

    Active ones are ordered by due date; history by submission time, newest first.
    """
    names = course_name_map(await load_courses(access))
    assignments = await access.select(Query(collection="assignments", order_by="due_date"))
    submissions = await access.select(
        Query(collection="submissions", eq={"user_id": user_id}, order_by="submitted_at", descending=True)
    )
    by_id = {str(a.get("id")): a for a in assignments}
    submitted_ids = {str(s.get("assignment_id")) for s in submissions}

    active = [
        ActiveAssignment(
            id=str(a.get("id")),
            title=str(a.get("title") or ""),
            description=str(a.get("description") or ""),
            course_name=names.get(str(a.get("course_id") or ""), "-"),
            due_date=str(a.get("due_date") or ""),
        )
        for a in assignments
        if str(a.get("id")) not in submitted_ids
    ]

    history = []
    for s in submissions:
        assignment = by_id.get(str(s.get("assignment_id")), {})
        grade = s.get("grade")
        history.append(
            SubmittedAssignment(
                submission_id=str(s.get("id")),
                assignment_id=str(s.get("assignment_id")),
                title=str(assignment.get("title") or "-"),
                course_name=names.get(str(assignment.get("course_id") or ""), "-"),
                submitted_at=str(s.get("submitted_at") or ""),
                grade=float(grade) if grade is not None else None,
                feedback=s.get("feedback"),
            )
        )
    return AssignmentOverview(active=active, history=history)


__all__ = ["ActiveAssignment", "SubmittedAssignment", "AssignmentOverview", "load_assignments"]
