"""Pydantic schemas for provider availability documents."""

from __future__ import annotations

import enum
import re
import uuid
from datetime import date, datetime, time

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_CLOCK_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class Weekday(str, enum.Enum):
    """Keys of the weekly availability map, Monday first."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


def parse_clock(value: str) -> time:
    """Parse an ``HH:MM`` time of day in [00:00, 24:00)."""

    match = _CLOCK_RE.match(value)
    if match is None:
        raise ValueError(f"Invalid time of day {value!r}; expected HH:MM")
    return time(int(match.group(1)), int(match.group(2)))


class TimeBlock(BaseModel):
    """Half-open open window within a day, e.g. 09:00-17:00."""

    start: str
    end: str

    model_config = ConfigDict(frozen=True)

    @field_validator("start", "end")
    @classmethod
    def _check_clock(cls, value: str) -> str:
        parse_clock(value)
        return value

    @model_validator(mode="after")
    def _check_order(self) -> TimeBlock:
        if self.start_time >= self.end_time:
            raise ValueError(f"start {self.start} must be before end {self.end}")
        return self

    @property
    def start_time(self) -> time:
        return parse_clock(self.start)

    @property
    def end_time(self) -> time:
        return parse_clock(self.end)


class DaySchedule(BaseModel):
    is_active: bool = False
    slots: list[TimeBlock] = Field(default_factory=list)


class CustomDateOverride(DaySchedule):
    """Schedule that replaces the weekly entry for one calendar date."""

    date: date


def _overlapping_pair(blocks: list[TimeBlock]) -> tuple[int, int] | None:
    ordered = sorted(enumerate(blocks), key=lambda item: item[1].start_time)
    for (prev_index, prev), (index, block) in zip(ordered, ordered[1:]):
        if block.start_time < prev.end_time:
            return prev_index, index
    return None


class AvailabilityUpdate(BaseModel):
    """Complete replacement of a provider's availability."""

    days: dict[Weekday, DaySchedule]
    custom_dates: list[CustomDateOverride] = Field(default_factory=list)

    @field_validator("days")
    @classmethod
    def _require_full_week(
        cls, value: dict[Weekday, DaySchedule]
    ) -> dict[Weekday, DaySchedule]:
        missing = [day.value for day in Weekday if day not in value]
        if missing:
            raise ValueError(f"Missing weekdays: {', '.join(missing)}")
        return value

    @model_validator(mode="after")
    def _reject_overlapping_blocks(self) -> AvailabilityUpdate:
        for weekday, schedule in self.days.items():
            pair = _overlapping_pair(schedule.slots)
            if pair is not None:
                raise ValueError(
                    f"days.{weekday.value}: slots[{pair[0]}] and slots[{pair[1]}] overlap"
                )
        for position, override in enumerate(self.custom_dates):
            pair = _overlapping_pair(override.slots)
            if pair is not None:
                raise ValueError(
                    f"custom_dates[{position}] ({override.date.isoformat()}): "
                    f"slots[{pair[0]}] and slots[{pair[1]}] overlap"
                )
        return self


class AvailabilityRead(BaseModel):
    id: uuid.UUID
    provider_id: uuid.UUID
    days: dict[Weekday, DaySchedule]
    custom_dates: list[CustomDateOverride]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OpenSlotsRead(BaseModel):
    service_id: uuid.UUID
    provider_id: uuid.UUID
    date: date
    duration_minutes: int
    slots: list[datetime]
