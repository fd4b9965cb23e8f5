import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps import DepartmentId, get_db
from app.models.faculty import Faculty
from app.models.subject import Subject
from app.schemas.faculty import AvailabilityEntry, FacultyCreate, FacultyOut, FacultyUpdate
from app.services.institution_settings import load_timetable_settings
from app.services.roster import faculty_out, next_roster_position, roster_query

router = APIRouter()
logger = logging.getLogger(__name__)

ROSTER_POSITION_ATTEMPTS = 3


def find_subject(db: Session, code: str) -> Subject | None:
    return db.execute(select(Subject).where(Subject.code == code)).scalar_one_or_none()


def ensure_periods_in_range(db: Session, availability: list[AvailabilityEntry]) -> None:
    limit = load_timetable_settings(db).numberOfPeriods
    invalid = sorted(
        {f"{entry.day} {number}" for entry in availability for number in entry.periods if number > limit}
    )
    if invalid:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Period numbers must be between 1 and {limit}; got: {', '.join(invalid)}",
        )


def get_faculty_or_404(db: Session, faculty_id: str) -> Faculty:
    faculty = db.get(Faculty, faculty_id)
    if faculty is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Faculty not found")
    return faculty


@router.get("/", response_model=list[FacultyOut])
def list_faculty(db: Session = Depends(get_db)) -> list[FacultyOut]:
    return [faculty_out(item) for item in db.execute(roster_query()).unique().scalars()]


@router.get("/by-department", response_model=list[FacultyOut])
def list_faculty_by_department(
    department_id: str = DepartmentId,
    db: Session = Depends(get_db),
) -> list[FacultyOut]:
    return [faculty_out(item) for item in db.execute(roster_query(department_id)).unique().scalars()]


@router.post("/", response_model=FacultyOut, status_code=status.HTTP_201_CREATED)
def create_faculty(payload: FacultyCreate, db: Session = Depends(get_db)) -> FacultyOut:
    subject = find_subject(db, payload.subjectCode)
    if subject is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Invalid subject code: "{payload.subjectCode}"',
        )
    ensure_periods_in_range(db, payload.availability)

    department_id = subject.department_id
    availability = [entry.model_dump() for entry in payload.availability]
    for _ in range(ROSTER_POSITION_ATTEMPTS):
        position = next_roster_position(db)
        faculty = Faculty(
            name=payload.name,
            subject_id=subject.id,
            department_id=department_id,
            availability=availability,
            roster_position=position,
        )
        db.add(faculty)
        try:
            db.commit()
            break
        except IntegrityError:
            # Another create took this position first.
            db.rollback()
            logger.warning("Roster position %d already taken; retrying", position)
    else:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Could not assign a roster position; please retry",
        )
    db.refresh(faculty)
    logger.info("Added faculty %s (%s) to department %s", faculty.name, subject.code, faculty.department_id)
    return faculty_out(faculty)


@router.put("/{faculty_id}", response_model=FacultyOut)
def update_faculty(faculty_id: str, payload: FacultyUpdate, db: Session = Depends(get_db)) -> FacultyOut:
    subject = find_subject(db, payload.subjectCode)
    if subject is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f'Subject with code "{payload.subjectCode}" not found',
        )
    faculty = get_faculty_or_404(db, faculty_id)
    ensure_periods_in_range(db, payload.availability)

    faculty.name = payload.name
    faculty.subject = subject
    faculty.department_id = subject.department_id
    faculty.availability = [entry.model_dump() for entry in payload.availability]
    db.commit()
    db.refresh(faculty)
    logger.info("Updated faculty %s", faculty.id)
    return faculty_out(faculty)


@router.delete("/{faculty_id}")
def delete_faculty(faculty_id: str, db: Session = Depends(get_db)) -> dict:
    faculty = get_faculty_or_404(db, faculty_id)
    db.delete(faculty)
    db.commit()
    logger.info("Deleted faculty %s", faculty_id)
    return {"success": True, "message": "Faculty deleted successfully"}
