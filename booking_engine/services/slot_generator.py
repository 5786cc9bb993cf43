"""Pure slot arithmetic over a single day's open blocks.

All civil times are interpreted in UTC: a block ``09:00-10:00`` on
2025-01-06 covers ``2025-01-06T09:00Z`` to ``2025-01-06T10:00Z``.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta

from booking_engine.schemas.availability import DaySchedule, TimeBlock, Weekday
from booking_engine.services.errors import InvalidRequestError

_WEEKDAYS: tuple[Weekday, ...] = tuple(Weekday)


def normalize_datetime(moment: datetime) -> datetime:
    """Return ``moment`` as an aware UTC datetime; naive values are taken as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def weekday_of(day: date) -> Weekday:
    """Name of the weekday ``day`` falls on in the UTC civil calendar."""
    return _WEEKDAYS[day.weekday()]


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open UTC window ``[day 00:00, next day 00:00)``."""
    start = datetime.combine(day, time.min, tzinfo=UTC)
    return start, start + timedelta(days=1)


def overlaps(
    start: datetime, end: datetime, other_start: datetime, other_end: datetime
) -> bool:
    """Half-open interval overlap: ``[start, end)`` and ``[other_start, other_end)``."""
    return start < other_end and end > other_start


def _walk_block(
    block: TimeBlock, *, reference_date: date, duration: timedelta
) -> list[datetime]:
    block_start = datetime.combine(reference_date, block.start_time, tzinfo=UTC)
    block_end = datetime.combine(reference_date, block.end_time, tzinfo=UTC)
    starts: list[datetime] = []
    cursor = block_start
    while cursor + duration <= block_end:
        starts.append(cursor)
        cursor += duration
    return starts


def generate_slots(
    day_schedule: DaySchedule,
    duration_minutes: int,
    reference_date: date,
) -> list[datetime]:
    """Enumerate candidate start instants for ``reference_date``.

    Each block is walked independently, in input order, in steps of
    ``duration_minutes``; a candidate is kept while it ends at or before the
    block end. Blocks are neither sorted nor merged, so overlapping input
    blocks can produce repeated or overlapping candidates.
    """
    if duration_minutes <= 0:
        raise InvalidRequestError("duration_minutes must be positive")
    if not day_schedule.is_active:
        return []
    duration = timedelta(minutes=duration_minutes)
    candidates: list[datetime] = []
    for block in day_schedule.slots:
        candidates.extend(
            _walk_block(block, reference_date=reference_date, duration=duration)
        )
    return candidates


__all__ = [
    "day_bounds",
    "generate_slots",
    "normalize_datetime",
    "overlaps",
    "weekday_of",
]
