from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator


class PeriodBlock(BaseModel):
    type: Literal["period"] = "period"
    periodNumber: int = Field(ge=1)
    startTime: str
    endTime: str
    duration: int = Field(ge=1)


class BreakBlock(BaseModel):
    type: Literal["break"] = "break"
    name: str
    startTime: str
    endTime: str
    duration: int = Field(ge=1)


ScheduleBlock = Annotated[Union[PeriodBlock, BreakBlock], Field(discriminator="type")]


class ScheduleLayout(BaseModel):
    blocks: list[ScheduleBlock] = Field(default_factory=list)
    requestedPeriods: int
    emittedPeriods: int

    @property
    def shortfall(self) -> int:
        return max(0, self.requestedPeriods - self.emittedPeriods)

    @property
    def period_blocks(self) -> list[PeriodBlock]:
        return [block for block in self.blocks if isinstance(block, PeriodBlock)]

    @property
    def period_numbers(self) -> list[int]:
        return [block.periodNumber for block in self.period_blocks]

    def shortfall_message(self) -> str | None:
        if not self.shortfall:
            return None
        return (
            f"Only {self.emittedPeriods} of {self.requestedPeriods} periods fit within working hours. "
            "Adjust working hours, period duration, or breaks."
        )


class ScheduleLayoutOut(BaseModel):
    blocks: list[ScheduleBlock]
    requestedPeriods: int
    emittedPeriods: int
    shortfall: int
    message: str | None = None

    @classmethod
    def from_layout(cls, layout: ScheduleLayout) -> "ScheduleLayoutOut":
        return cls(
            blocks=layout.blocks,
            requestedPeriods=layout.requestedPeriods,
            emittedPeriods=layout.emittedPeriods,
            shortfall=layout.shortfall,
            message=layout.shortfall_message(),
        )


class TimetableSlot(BaseModel):
    subjectName: str
    facultyName: str
    facultyId: str


TimetableGrid = dict[str, dict[str, TimetableSlot | None]]


class TimetableOut(BaseModel):
    departmentId: str
    timetable: TimetableGrid
    periodCount: int
    filledCells: int
    emptyCells: int
    updatedAt: datetime | None = None


class GenerateTimetableResponse(BaseModel):
    success: bool = True
    message: str
    data: TimetableOut
    requestedPeriods: int
    emittedPeriods: int
    shortfall: int = 0


class DepartmentQuery(BaseModel):
    departmentId: str = Field(min_length=1, max_length=36)

    @field_validator("departmentId")
    @classmethod
    def validate_plain_identifier(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Department ID is required")
        if cleaned[0] in "{[\"":
            raise ValueError("Department ID must be a plain identifier, not a serialized object")
        return cleaned
