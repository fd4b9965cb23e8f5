from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundError
from app.models.department import Department
from app.models.timetable import DepartmentTimetable
from app.schemas.timetable import ScheduleLayout, TimetableOut
from app.services.assignment import GeneratedTimetable, GenerationSession, generate_timetable
from app.services.institution_settings import load_timetable_settings
from app.services.roster import load_roster
from app.services.slot_layout import build_layout

logger = logging.getLogger(__name__)

_locks_guard = threading.Lock()
_department_locks: dict[str, threading.Lock] = {}


@contextmanager
def department_generation_lock(*department_ids: str) -> Iterator[None]:
    """Serialise generation per department; other departments proceed in parallel."""
    with _locks_guard:
        locks = [_department_locks.setdefault(key, threading.Lock()) for key in sorted(set(department_ids))]
    # Acquire in sorted order so overlapping multi-department runs cannot deadlock.
    with ExitStack() as stack:
        for lock in locks:
            stack.enter_context(lock)
        yield


@dataclass
class GenerationOutcome:
    department_id: str
    layout: ScheduleLayout
    generated: GeneratedTimetable | None
    record: DepartmentTimetable | None

    @property
    def found(self) -> bool:
        return self.generated is not None


def get_department(db: Session, department_id: str) -> Department:
    department = db.get(Department, department_id)
    if department is None:
        raise ResourceNotFoundError("Department", department_id)
    return department


def get_timetable_record(db: Session, department_id: str) -> DepartmentTimetable | None:
    return db.execute(
        select(DepartmentTimetable).where(DepartmentTimetable.department_id == department_id)
    ).scalar_one_or_none()


def timetable_out(record: DepartmentTimetable) -> TimetableOut:
    return TimetableOut(
        departmentId=record.department_id,
        timetable=record.payload,
        periodCount=record.period_count,
        filledCells=record.filled_cells,
        emptyCells=record.empty_cells,
        updatedAt=record.updated_at,
    )


def _reserve_other_departments(db: Session, session: GenerationSession, department_ids: set[str]) -> None:
    records = db.execute(
        select(DepartmentTimetable).where(DepartmentTimetable.department_id.not_in(sorted(department_ids)))
    ).scalars()
    reserved = sum(session.reserve_payload(record.payload) for record in records)
    if reserved:
        logger.debug("Reserved %d cells already committed by other departments", reserved)


def _upsert(db: Session, generated: GeneratedTimetable) -> DepartmentTimetable:
    record = get_timetable_record(db, generated.department_id)
    if record is None:
        record = DepartmentTimetable(department_id=generated.department_id, payload={})
        db.add(record)
        logger.info("Creating timetable for department %s", generated.department_id)
    else:
        logger.info("Replacing timetable for department %s", generated.department_id)
    record.payload = generated.to_payload()
    record.period_count = len(generated.period_numbers)
    record.filled_cells = generated.filled_cells
    record.empty_cells = generated.empty_cells
    return record


def _generate(
    db: Session,
    department_ids: list[str],
) -> list[GenerationOutcome]:
    settings = load_timetable_settings(db)
    layout = build_layout(settings)
    roster = load_roster(db)
    session = GenerationSession()
    _reserve_other_departments(db, session, set(department_ids))

    outcomes: list[GenerationOutcome] = []
    for department_id in department_ids:
        generated = generate_timetable(
            department_id,
            roster,
            layout.blocks,
            session=session,
            period_limit=settings.numberOfPeriods,
        )
        record = _upsert(db, generated) if generated is not None else None
        outcomes.append(
            GenerationOutcome(department_id=department_id, layout=layout, generated=generated, record=record)
        )
    db.commit()
    for outcome in outcomes:
        if outcome.record is not None:
            db.refresh(outcome.record)
    return outcomes


def generate_department_timetable(db: Session, department_id: str) -> GenerationOutcome:
    """Build the slot layout, fill the department's grid and upsert it.

    A department without faculty yields an outcome with ``generated`` set to
    ``None`` and leaves any stored timetable untouched.
    """
    get_department(db, department_id)
    with department_generation_lock(department_id):
        (outcome,) = _generate(db, [department_id])
    return outcome


def generate_all_timetables(db: Session) -> list[GenerationOutcome]:
    """Regenerate every department in one run sharing a single occupancy set."""
    department_ids = list(db.execute(select(Department.id).order_by(Department.name, Department.id)).scalars())
    if not department_ids:
        return []
    with department_generation_lock(*department_ids):
        return _generate(db, department_ids)


def delete_department_timetable(db: Session, department_id: str) -> bool:
    with department_generation_lock(department_id):
        record = get_timetable_record(db, department_id)
        if record is None:
            return False
        db.delete(record)
        db.commit()
    logger.info("Deleted timetable for department %s", department_id)
    return True
