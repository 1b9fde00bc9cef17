"""Calendar-day and rotation utilities for recurring schedules."""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Union

DateLike = Union[date, datetime, str]

MAX_DATE = date(9999, 12, 31)
MIN_DATE = date(1970, 1, 1)
ONE_DAY = timedelta(days=1)


def as_day(value: DateLike) -> date:
    """Truncate *value* to its UTC calendar day.

    Aware datetimes are converted to UTC first; naive datetimes are taken as
    UTC. Strings are parsed as ISO dates or datetimes.
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        return as_day(datetime.fromisoformat(text.replace("Z", "+00:00")))
    raise TypeError(f"Unsupported date value: {value!r}")


def week_start(day: date) -> date:
    """Return the Sunday on or before *day*."""

    # date.weekday(): Monday == 0 ... Sunday == 6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_end(day: date) -> date:
    """Return the Saturday on or after *day*."""

    return day + timedelta(days=(5 - day.weekday()) % 7)


def day_offset(anchor: date, day: date) -> int:
    """Whole days between the Sunday epoch of *anchor* and *day*."""

    return (day - week_start(anchor)).days


def rotation_index(offset: int, rotation_days: int, schedule_count: int) -> int:
    """Which schedule of a rotating set applies *offset* days after the epoch."""

    if rotation_days <= 0 or schedule_count <= 1:
        return 0
    return (offset // rotation_days) % schedule_count


def cycle_days(start: date, end: date) -> Iterator[date]:
    """Yield every day from *start* through *end* inclusive."""

    day = start
    while day <= end:
        yield day
        day += ONE_DAY


def in_window(day: date, start: date, end: date) -> bool:
    return start <= day <= end


__all__ = [
    "DateLike",
    "MAX_DATE",
    "MIN_DATE",
    "ONE_DAY",
    "as_day",
    "week_start",
    "week_end",
    "day_offset",
    "rotation_index",
    "cycle_days",
    "in_window",
]
