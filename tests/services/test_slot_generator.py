"""Tests for the pure slot arithmetic."""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from booking_engine.schemas.availability import DaySchedule, TimeBlock, Weekday
from booking_engine.services.errors import InvalidRequestError
from booking_engine.services.slot_generator import (
    day_bounds,
    generate_slots,
    normalize_datetime,
    overlaps,
    weekday_of,
)

MONDAY = date(2025, 1, 6)


def _at(hour: int, minute: int = 0, day: date = MONDAY) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=UTC)


def test_block_is_walked_in_duration_steps_until_the_end() -> None:
    schedule = DaySchedule(is_active=True, slots=[TimeBlock(start="09:00", end="10:00")])

    slots = generate_slots(schedule, 20, MONDAY)

    assert slots == [_at(9, 0), _at(9, 20), _at(9, 40)]


def test_partial_tail_is_not_offered() -> None:
    schedule = DaySchedule(is_active=True, slots=[TimeBlock(start="09:00", end="10:10")])

    assert generate_slots(schedule, 30, MONDAY) == [_at(9, 0), _at(9, 30)]


def test_inactive_day_yields_nothing_even_with_blocks() -> None:
    schedule = DaySchedule(is_active=False, slots=[TimeBlock(start="09:00", end="17:00")])

    assert generate_slots(schedule, 30, MONDAY) == []


def test_active_day_without_blocks_yields_nothing() -> None:
    assert generate_slots(DaySchedule(is_active=True, slots=[]), 30, MONDAY) == []


def test_block_shorter_than_duration_yields_nothing() -> None:
    schedule = DaySchedule(is_active=True, slots=[TimeBlock(start="09:00", end="09:45")])

    assert generate_slots(schedule, 60, MONDAY) == []


def test_blocks_keep_input_order_and_are_not_merged() -> None:
    schedule = DaySchedule(
        is_active=True,
        slots=[
            TimeBlock(start="14:00", end="15:00"),
            TimeBlock(start="09:00", end="10:00"),
        ],
    )

    assert generate_slots(schedule, 30, MONDAY) == [
        _at(14, 0),
        _at(14, 30),
        _at(9, 0),
        _at(9, 30),
    ]


def test_overlapping_blocks_can_repeat_candidates() -> None:
    schedule = DaySchedule(
        is_active=True,
        slots=[
            TimeBlock(start="09:00", end="10:00"),
            TimeBlock(start="09:30", end="10:30"),
        ],
    )

    slots = generate_slots(schedule, 30, MONDAY)

    assert slots == [_at(9, 0), _at(9, 30), _at(9, 30), _at(10, 0)]


@pytest.mark.parametrize("duration", [0, -15])
def test_non_positive_duration_is_rejected(duration: int) -> None:
    schedule = DaySchedule(is_active=True, slots=[TimeBlock(start="09:00", end="10:00")])

    with pytest.raises(InvalidRequestError):
        generate_slots(schedule, duration, MONDAY)


def test_late_block_stays_on_reference_date() -> None:
    schedule = DaySchedule(is_active=True, slots=[TimeBlock(start="23:00", end="23:59")])

    slots = generate_slots(schedule, 30, MONDAY)

    assert slots == [_at(23, 0)]
    assert slots[0].date() == MONDAY


def test_weekday_of_uses_calendar_date() -> None:
    assert weekday_of(date(2025, 1, 6)) is Weekday.MONDAY
    assert weekday_of(date(2025, 1, 12)) is Weekday.SUNDAY
    assert weekday_of(date(2024, 2, 29)) is Weekday.THURSDAY


def test_day_bounds_cover_exactly_one_utc_day() -> None:
    start, end = day_bounds(MONDAY)

    assert start == _at(0, 0)
    assert end == _at(0, 0, day=date(2025, 1, 7))


def test_overlap_is_half_open() -> None:
    assert overlaps(_at(9), _at(10), _at(9, 30), _at(10, 30))
    assert not overlaps(_at(9), _at(10), _at(10), _at(11))
    assert not overlaps(_at(10), _at(11), _at(9), _at(10))


def test_normalize_datetime_treats_naive_values_as_utc() -> None:
    naive = datetime(2025, 1, 6, 9, 0)

    assert normalize_datetime(naive) == _at(9)
    assert normalize_datetime(naive).tzinfo is UTC
