from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.faculty import Faculty
from app.schemas.faculty import AvailabilityEntry, FacultyOut, FacultyRosterEntry


def roster_entry(faculty: Faculty) -> FacultyRosterEntry:
    return FacultyRosterEntry(
        id=faculty.id,
        name=faculty.name,
        subjectCode=faculty.subject.code,
        subjectName=faculty.subject.name,
        departmentId=faculty.department_id,
        availability=[AvailabilityEntry.model_validate(item) for item in faculty.availability or []],
    )


def faculty_out(faculty: Faculty) -> FacultyOut:
    entry = roster_entry(faculty)
    department = faculty.subject.department if faculty.subject is not None else None
    return FacultyOut(**entry.model_dump(), departmentName=department.name if department else None)


def roster_query(department_id: str | None = None):
    query = select(Faculty).order_by(Faculty.roster_position, Faculty.id)
    if department_id is not None:
        query = query.where(Faculty.department_id == department_id)
    return query


def load_roster(db: Session, department_id: str | None = None) -> list[FacultyRosterEntry]:
    """Faculty in roster order; the whole institution unless a department is given."""
    return [roster_entry(item) for item in db.execute(roster_query(department_id)).unique().scalars()]


def next_roster_position(db: Session) -> int:
    current = db.execute(select(func.max(Faculty.roster_position))).scalar_one_or_none()
    return (current or 0) + 1


def faculty_beyond_period_limit(db: Session, limit: int) -> list[Faculty]:
    """Faculty whose saved availability names a period above ``limit``."""
    return [
        item
        for item in db.execute(roster_query()).unique().scalars()
        if any(number > limit for entry in item.availability or [] for number in entry.get("periods", []))
    ]
