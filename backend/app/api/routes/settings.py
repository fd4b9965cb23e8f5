import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.config import get_settings
from app.models.institution_settings import InstitutionSettings
from app.schemas.settings import TimetableSettings
from app.schemas.timetable import ScheduleLayoutOut
from app.services.institution_settings import (
    apply_timetable_settings,
    build_timetable_settings,
    get_settings_record,
    load_timetable_settings,
)
from app.services.roster import faculty_beyond_period_limit
from app.services.slot_layout import build_layout

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/settings", response_model=TimetableSettings)
def get_timetable_settings(db: Session = Depends(get_db)) -> TimetableSettings:
    return load_timetable_settings(db)


@router.put("/settings", response_model=TimetableSettings)
def update_timetable_settings(payload: TimetableSettings, db: Session = Depends(get_db)) -> TimetableSettings:
    conflicts = faculty_beyond_period_limit(db, payload.numberOfPeriods)
    if conflicts:
        names = ", ".join(item.name for item in conflicts)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=(
                f"Cannot reduce the number of periods to {payload.numberOfPeriods}: "
                f"availability of {names} lists later periods"
            ),
        )

    record = get_settings_record(db)
    if record is None:
        record = InstitutionSettings(id=1)
        db.add(record)
    apply_timetable_settings(record, payload)
    db.commit()
    db.refresh(record)

    saved = build_timetable_settings(record, get_settings())
    layout = build_layout(saved)
    logger.info(
        "Timetable settings updated: %s-%s, %d x %d min, %d break(s); %d period(s) fit",
        saved.workingHours.startTime,
        saved.workingHours.endTime,
        saved.numberOfPeriods,
        saved.periodDuration,
        len(saved.breakTimes),
        layout.emittedPeriods,
    )
    return saved


@router.get("/settings/schedule", response_model=ScheduleLayoutOut)
def get_schedule_layout(db: Session = Depends(get_db)) -> ScheduleLayoutOut:
    return ScheduleLayoutOut.from_layout(build_layout(load_timetable_settings(db)))
