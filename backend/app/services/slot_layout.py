from __future__ import annotations

import logging
from dataclasses import dataclass

from app.core.exceptions import MalformedSettingsError
from app.schemas.settings import TimetableSettings, format_clock_time, parse_clock_time
from app.schemas.timetable import BreakBlock, PeriodBlock, ScheduleLayout

logger = logging.getLogger(__name__)

# A lead-in shorter than this before a break is dropped instead of becoming a stub period.
MIN_PARTIAL_PERIOD_MINUTES = 20


@dataclass(frozen=True)
class _BreakWindow:
    name: str
    start: int
    end: int


def _minutes(value: str, label: str) -> int:
    try:
        return parse_clock_time(value)
    except ValueError as exc:
        raise MalformedSettingsError(f"Invalid {label}: {exc}", details={"field": label, "value": value}) from exc


def _clock(minutes: int, label: str) -> str:
    try:
        return format_clock_time(minutes)
    except ValueError as exc:
        raise MalformedSettingsError(f"{label} runs past midnight", details={"minutes": minutes}) from exc


def _enabled_breaks(settings: TimetableSettings) -> list[_BreakWindow]:
    windows: list[_BreakWindow] = []
    for item in settings.breakTimes:
        if not item.enabled:
            continue
        start = _minutes(item.startTime, f"start time of break {item.name!r}")
        end = _minutes(item.endTime, f"end time of break {item.name!r}")
        if end <= start:
            raise MalformedSettingsError(
                f"Break {item.name!r} must end after it starts",
                details={"break": item.name},
            )
        windows.append(_BreakWindow(name=item.name, start=start, end=end))
    # sorted() is stable, so breaks sharing a start keep their configured order.
    return sorted(windows, key=lambda window: window.start)


def build_schedule(settings: TimetableSettings) -> list[PeriodBlock | BreakBlock]:
    """Lay out the day's periods and breaks in chronological order.

    Periods are numbered from 1 in the order they are emitted. A break that
    starts inside the period currently being laid out cuts that period short;
    the remaining lead-in is kept only when it is at least
    ``MIN_PARTIAL_PERIOD_MINUTES`` long. Breaks themselves are always emitted,
    each at most once, with their configured bounds. The final period is
    clipped to the end of working hours. Fewer periods than requested may be
    produced when they do not fit.
    """
    work_start = _minutes(settings.workingHours.startTime, "working hours start time")
    work_end = _minutes(settings.workingHours.endTime, "working hours end time")
    if work_end <= work_start:
        raise MalformedSettingsError("Working hours must end after they start")

    period_duration = settings.periodDuration
    number_of_periods = settings.numberOfPeriods
    if period_duration < 1:
        raise MalformedSettingsError("Period duration must be at least one minute")
    if number_of_periods < 1:
        raise MalformedSettingsError("Number of periods must be at least one")

    pending = _enabled_breaks(settings)
    blocks: list[PeriodBlock | BreakBlock] = []
    current = work_start
    period_number = 1

    while current < work_end and period_number <= number_of_periods:
        interrupting = next(
            (window for window in pending if current <= window.start < current + period_duration),
            None,
        )

        if interrupting is not None:
            lead_in = interrupting.start - current
            if lead_in >= MIN_PARTIAL_PERIOD_MINUTES:
                blocks.append(
                    PeriodBlock(
                        periodNumber=period_number,
                        startTime=_clock(current, "Period"),
                        endTime=_clock(interrupting.start, "Period"),
                        duration=lead_in,
                    )
                )
                period_number += 1
            blocks.append(
                BreakBlock(
                    name=interrupting.name,
                    startTime=_clock(interrupting.start, "Break"),
                    endTime=_clock(interrupting.end, "Break"),
                    duration=interrupting.end - interrupting.start,
                )
            )
            current = interrupting.end
            pending.remove(interrupting)
            continue

        period_end = min(current + period_duration, work_end)
        if period_end <= current:
            break
        blocks.append(
            PeriodBlock(
                periodNumber=period_number,
                startTime=_clock(current, "Period"),
                endTime=_clock(period_end, "Period"),
                duration=period_end - current,
            )
        )
        period_number += 1
        current = period_end

    return blocks


def build_layout(settings: TimetableSettings) -> ScheduleLayout:
    blocks = build_schedule(settings)
    emitted = sum(1 for block in blocks if isinstance(block, PeriodBlock))
    layout = ScheduleLayout(
        blocks=blocks,
        requestedPeriods=settings.numberOfPeriods,
        emittedPeriods=emitted,
    )
    if layout.shortfall:
        logger.warning(
            "Slot layout shortfall: %d of %d periods fit between %s and %s",
            emitted,
            settings.numberOfPeriods,
            settings.workingHours.startTime,
            settings.workingHours.endTime,
        )
    return layout
