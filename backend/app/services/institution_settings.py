from __future__ import annotations

import logging

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.exceptions import MalformedSettingsError
from app.models.institution_settings import InstitutionSettings
from app.schemas.settings import TimetableSettings, default_timetable_settings

logger = logging.getLogger(__name__)


def get_settings_record(db: Session) -> InstitutionSettings | None:
    return db.execute(select(InstitutionSettings).where(InstitutionSettings.id == 1)).scalar_one_or_none()


def apply_timetable_settings(record: InstitutionSettings, payload: TimetableSettings) -> InstitutionSettings:
    record.working_start = payload.workingHours.startTime
    record.working_end = payload.workingHours.endTime
    record.period_duration = payload.periodDuration
    record.number_of_periods = payload.numberOfPeriods
    record.break_times = [item.model_dump() for item in payload.breakTimes]
    return record


def build_timetable_settings(
    record: InstitutionSettings | None,
    config: Settings | None = None,
) -> TimetableSettings:
    """Read the stored settings, falling back to configured defaults when none are saved."""
    if record is None:
        return default_timetable_settings(config or get_settings())
    try:
        return TimetableSettings.model_validate(
            {
                "workingHours": {"startTime": record.working_start, "endTime": record.working_end},
                "periodDuration": record.period_duration,
                "numberOfPeriods": record.number_of_periods,
                "breakTimes": record.break_times or [],
            }
        )
    except ValidationError as exc:
        logger.warning("Stored institution settings are invalid: %s", exc.errors(include_url=False))
        raise MalformedSettingsError(
            "Stored timetable settings are invalid; update them before generating a timetable",
            details={"errors": exc.errors(include_url=False, include_context=False)},
        ) from exc


def load_timetable_settings(db: Session) -> TimetableSettings:
    return build_timetable_settings(get_settings_record(db))
