from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from app.core.exceptions import MalformedAvailabilityError
from app.schemas.faculty import FacultyRosterEntry
from app.schemas.settings import WEEK_DAYS
from app.schemas.timetable import PeriodBlock, TimetableSlot

logger = logging.getLogger(__name__)

OccupancyKey = tuple[str, str, int]


@dataclass
class GenerationSession:
    """Per-run record of which faculty member is committed to which cell.

    One session is shared by every department generated in the same run so a
    faculty member is never placed in the same (day, period) twice.
    """

    occupancy: set[OccupancyKey] = field(default_factory=set)

    def is_occupied(self, faculty_id: str, day: str, period: int) -> bool:
        return (faculty_id, day, period) in self.occupancy

    def occupy(self, faculty_id: str, day: str, period: int) -> None:
        self.occupancy.add((faculty_id, day, period))

    def reserve_payload(self, payload: dict) -> int:
        """Mark every cell of an already persisted timetable payload as taken."""
        reserved = 0
        for day, cells in (payload or {}).items():
            for period, slot in (cells or {}).items():
                if not slot or not slot.get("facultyId"):
                    continue
                self.occupy(slot["facultyId"], day, int(period))
                reserved += 1
        return reserved


@dataclass
class GeneratedTimetable:
    department_id: str
    grid: dict[str, dict[int, TimetableSlot | None]]
    period_numbers: list[int]

    @property
    def filled_cells(self) -> int:
        return sum(1 for cells in self.grid.values() for slot in cells.values() if slot is not None)

    @property
    def empty_cells(self) -> int:
        return sum(1 for cells in self.grid.values() for slot in cells.values() if slot is None)

    def to_payload(self) -> dict[str, dict[str, dict | None]]:
        return {
            day: {
                str(period): (slot.model_dump() if slot is not None else None)
                for period, slot in cells.items()
            }
            for day, cells in self.grid.items()
        }


def _available_cells(
    member: FacultyRosterEntry,
    period_limit: int | None,
    days: Sequence[str],
) -> set[tuple[str, int]]:
    cells: set[tuple[str, int]] = set()
    for entry in member.availability:
        if entry.day not in days:
            raise MalformedAvailabilityError(
                f"Faculty {member.name!r} lists availability on unknown day {entry.day!r}",
                details={"facultyId": member.id, "day": entry.day},
            )
        for period in entry.periods:
            if period < 1 or (period_limit is not None and period > period_limit):
                raise MalformedAvailabilityError(
                    f"Faculty {member.name!r} lists period {period} on {entry.day}, "
                    f"outside 1..{period_limit if period_limit is not None else 'N'}",
                    details={"facultyId": member.id, "day": entry.day, "period": period},
                )
            cells.add((entry.day, period))
    return cells


def generate_timetable(
    department_id: str,
    roster: Iterable[FacultyRosterEntry],
    blocks: Iterable,
    *,
    session: GenerationSession | None = None,
    period_limit: int | None = None,
    days: Sequence[str] = WEEK_DAYS,
) -> GeneratedTimetable | None:
    """Greedily fill a department's day x period grid.

    Cells are visited day by day, period by period. Each takes the first
    faculty member of the department, in roster order, who is available for
    it and not already occupied in that cell by the session. Cells with no
    candidate stay ``None``. Returns ``None`` when the department has no
    faculty at all.
    """
    members = [member for member in roster if member.departmentId == department_id]
    if not members:
        logger.info("No faculty found for department %s", department_id)
        return None

    session = session if session is not None else GenerationSession()
    period_numbers = [block.periodNumber for block in blocks if isinstance(block, PeriodBlock)]
    availability = [(member, _available_cells(member, period_limit, days)) for member in members]

    grid: dict[str, dict[int, TimetableSlot | None]] = {}
    for day in days:
        row: dict[int, TimetableSlot | None] = {}
        for period in period_numbers:
            row[period] = None
            for member, cells in availability:
                if (day, period) not in cells:
                    continue
                if session.is_occupied(member.id, day, period):
                    continue
                row[period] = TimetableSlot(
                    subjectName=member.subjectName,
                    facultyName=member.name,
                    facultyId=member.id,
                )
                session.occupy(member.id, day, period)
                break
        grid[day] = row

    result = GeneratedTimetable(department_id=department_id, grid=grid, period_numbers=period_numbers)
    logger.info(
        "Generated timetable for department %s: %d filled, %d empty across %d periods",
        department_id,
        result.filled_cells,
        result.empty_cells,
        len(period_numbers),
    )
    return result
