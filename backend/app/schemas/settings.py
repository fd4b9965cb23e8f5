from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator, model_validator

from app.core.config import Settings

# Timetables always cover the teaching week, Monday first.
WEEK_DAYS: tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")

CLOCK_PATTERN = re.compile(r"^(1[0-2]|0?[1-9]):([0-5]\d)\s?(AM|PM)$", re.IGNORECASE)
MINUTES_PER_DAY = 24 * 60


def parse_clock_time(value: str) -> int:
    """Convert an ``H:MM AM|PM`` wall-clock string to minutes since midnight."""
    if not isinstance(value, str):
        raise ValueError("Time must be a string in H:MM AM/PM format")
    match = CLOCK_PATTERN.match(value.strip())
    if match is None:
        raise ValueError(f"Time {value!r} must be in H:MM AM/PM format")
    hours = int(match.group(1))
    minutes = int(match.group(2))
    meridiem = match.group(3).upper()
    if meridiem == "PM" and hours != 12:
        hours += 12
    if meridiem == "AM" and hours == 12:
        hours = 0
    return hours * 60 + minutes


def format_clock_time(minutes: int) -> str:
    if minutes < 0 or minutes >= MINUTES_PER_DAY:
        raise ValueError(f"{minutes} minutes is outside a single day")
    hours, mins = divmod(minutes, 60)
    meridiem = "PM" if hours >= 12 else "AM"
    if hours > 12:
        hours -= 12
    if hours == 0:
        hours = 12
    return f"{hours}:{mins:02d} {meridiem}"


def normalize_clock_time(value: str) -> str:
    return format_clock_time(parse_clock_time(value))


class WorkingHours(BaseModel):
    startTime: str
    endTime: str

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return normalize_clock_time(value)

    @model_validator(mode="after")
    def validate_time_order(self) -> "WorkingHours":
        if parse_clock_time(self.endTime) <= parse_clock_time(self.startTime):
            raise ValueError("Working hours must end after they start")
        return self


class BreakTime(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    startTime: str
    endTime: str
    enabled: bool = True

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Break name cannot be empty")
        return trimmed

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return normalize_clock_time(value)

    @model_validator(mode="after")
    def validate_time_order(self) -> "BreakTime":
        if parse_clock_time(self.endTime) <= parse_clock_time(self.startTime):
            raise ValueError(f"Break {self.name!r} must end after it starts")
        return self


class TimetableSettings(BaseModel):
    workingHours: WorkingHours
    periodDuration: int = Field(ge=1, le=600)
    numberOfPeriods: int = Field(ge=1, le=24)
    breakTimes: list[BreakTime] = Field(default_factory=list, max_length=20)

    @model_validator(mode="after")
    def validate_breaks(self) -> "TimetableSettings":
        seen: set[str] = set()
        for item in self.breakTimes:
            key = item.name.lower()
            if key in seen:
                raise ValueError(f"Duplicate break name: {item.name}")
            seen.add(key)

        windows = sorted(
            (parse_clock_time(item.startTime), parse_clock_time(item.endTime))
            for item in self.breakTimes
            if item.enabled
        )
        for index in range(1, len(windows)):
            prev_start, prev_end = windows[index - 1]
            start, end = windows[index]
            if start < prev_end and end > prev_start:
                raise ValueError("Enabled break windows cannot overlap")
        return self


def default_timetable_settings(config: Settings) -> TimetableSettings:
    return TimetableSettings(
        workingHours=WorkingHours(
            startTime=config.default_working_start,
            endTime=config.default_working_end,
        ),
        periodDuration=config.default_period_minutes,
        numberOfPeriods=config.default_number_of_periods,
        breakTimes=[
            BreakTime(name="Short Break", startTime="10:30 AM", endTime="10:45 AM", enabled=False),
            BreakTime(name="Lunch", startTime="12:00 PM", endTime="12:45 PM", enabled=True),
        ],
    )
