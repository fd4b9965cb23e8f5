from pydantic import BaseModel, Field, field_validator

from app.schemas.settings import WEEK_DAYS


class AvailabilityEntry(BaseModel):
    day: str
    periods: list[int] = Field(min_length=1, max_length=24)

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        day = value.strip().capitalize()
        if day not in WEEK_DAYS:
            raise ValueError(f"Invalid day value: {value!r}")
        return day

    @field_validator("periods")
    @classmethod
    def validate_periods(cls, value: list[int]) -> list[int]:
        seen: set[int] = set()
        ordered: list[int] = []
        for number in value:
            if number < 1:
                raise ValueError("Period numbers start at 1")
            if number in seen:
                continue
            seen.add(number)
            ordered.append(number)
        return ordered


def merge_availability(entries: list[AvailabilityEntry]) -> list[AvailabilityEntry]:
    """Fold repeated days together so each (day, period) pair occurs once."""
    merged: dict[str, list[int]] = {}
    for entry in entries:
        periods = merged.setdefault(entry.day, [])
        for number in entry.periods:
            if number not in periods:
                periods.append(number)
    return [
        AvailabilityEntry(day=day, periods=merged[day])
        for day in WEEK_DAYS
        if day in merged
    ]


class FacultyBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    subjectCode: str = Field(min_length=1, max_length=50)
    availability: list[AvailabilityEntry] = Field(min_length=1, max_length=len(WEEK_DAYS) * 4)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Name cannot be empty")
        return trimmed

    @field_validator("subjectCode")
    @classmethod
    def normalize_subject_code(cls, value: str) -> str:
        code = value.strip().upper()
        if not code:
            raise ValueError("Subject code cannot be empty")
        return code

    @field_validator("availability")
    @classmethod
    def collapse_availability(cls, value: list[AvailabilityEntry]) -> list[AvailabilityEntry]:
        return merge_availability(value)


class FacultyCreate(FacultyBase):
    pass


class FacultyUpdate(FacultyBase):
    pass


class FacultyRosterEntry(BaseModel):
    id: str
    name: str
    subjectCode: str
    subjectName: str
    departmentId: str
    availability: list[AvailabilityEntry] = Field(default_factory=list)


class FacultyOut(FacultyRosterEntry):
    departmentName: str | None = None
