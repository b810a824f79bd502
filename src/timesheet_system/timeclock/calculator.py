"""Work/break time arithmetic.

All functions are pure: they never read the clock and never mutate their inputs.
Durations are whole minutes, floored.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from ..core.constants import DEFAULT_WEEK_START_DAY
from ..core.exceptions import InvalidIntervalError, ValidationError
from .model import Break, TimeEntry


def duration_minutes(start: datetime, end: datetime) -> int:
    if end < start:
        raise InvalidIntervalError("End time cannot be before start time")
    return int((end - start).total_seconds() // 60)


def total_break_minutes(breaks: Iterable[Break]) -> int:
    total = 0
    for b in breaks:
        if b.end_time is None:
            continue
        total += b.duration if b.duration is not None else duration_minutes(b.start_time, b.end_time)
    return total


def total_work_minutes(clock_in: Optional[datetime], clock_out: Optional[datetime], breaks: Iterable[Break]) -> int:
    if clock_in is None or clock_out is None:
        return 0
    return max(0, duration_minutes(clock_in, clock_out) - total_break_minutes(breaks))


def entry_work_minutes(entry: TimeEntry) -> int:
    return total_work_minutes(entry.clock_in, entry.clock_out, entry.breaks)


def week_total(entries: Iterable[TimeEntry], week_start: date, week_end: date) -> int:
    return sum(entry_work_minutes(e) for e in entries if week_start <= e.work_date <= week_end)


def week_bounds(day: date, week_start_day: int = DEFAULT_WEEK_START_DAY) -> tuple[date, date]:
    """Company week containing ``day``; ``week_start_day`` uses date.weekday() numbering."""
    if not 0 <= int(week_start_day) <= 6:
        raise ValidationError("Week start day must be between 0 (Monday) and 6 (Sunday)")
    offset = (day.weekday() - int(week_start_day)) % 7
    start = day - timedelta(days=offset)
    return start, start + timedelta(days=6)
