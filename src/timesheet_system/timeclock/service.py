from __future__ import annotations

import calendar
import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_WEEK_START_DAY
from ..core.enums import SummaryPeriod
from ..core.exceptions import ConcurrentModificationError, NotFoundError, ValidationError
from . import calculator, state_machine
from .model import TimeEntry
from .repository import TimeEntryRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeSummary:
    today: int
    week: int
    month: int


def save_transition(entries: TimeEntryRepository, before: TimeEntry, after: TimeEntry) -> TimeEntry:
    """Persist ``after`` only if the stored entry still matches ``before``."""

    saved = entries.save(after, expected_version=before.version, expected_status=before.status)
    if saved is None:
        logger.warning(
            "Concurrent modification on time entry %s/%s (expected version=%s status=%s)",
            before.employee_id,
            before.work_date,
            before.version,
            before.status.value,
        )
        raise ConcurrentModificationError("This time entry was changed by someone else. Reload and try again.")
    return saved


def with_week_totals(
    entries: TimeEntryRepository,
    items: Iterable[TimeEntry],
    *,
    week_start_day: int = DEFAULT_WEEK_START_DAY,
) -> list[TimeEntry]:
    """Copies of ``items`` whose week_total covers the whole company week.

    The stored week_total is a snapshot taken when that entry was written, so it
    misses later days of the same week. Read paths go through this instead.
    """
    items = list(items)
    if not items:
        return []

    def week_of(e: TimeEntry) -> date:
        return calculator.week_bounds(e.work_date, week_start_day)[0]

    employee_ids = {e.employee_id for e in items}
    stored = entries.list_entries(
        start_date=min(week_of(e) for e in items),
        end_date=max(week_of(e) for e in items) + timedelta(days=6),
        employee_id=next(iter(employee_ids)) if len(employee_ids) == 1 else None,
    )

    totals: dict[tuple[str, date], int] = defaultdict(int)
    for e in stored:
        totals[(e.employee_id, week_of(e))] += calculator.entry_work_minutes(e)
    return [replace(e, week_total=totals.get((e.employee_id, week_of(e)), 0)) for e in items]


class TimeClockService:
    def __init__(
        self,
        entries: TimeEntryRepository,
        *,
        week_start_day: int = DEFAULT_WEEK_START_DAY,
        clock: Callable[[], datetime] = now_local,
    ):
        self._entries = entries
        self._week_start_day = int(week_start_day)
        self._clock = clock

    def _with_week_total(self, entry: TimeEntry) -> TimeEntry:
        start, end = calculator.week_bounds(entry.work_date, self._week_start_day)
        others = [
            e
            for e in self._entries.list_entries(start_date=start, end_date=end, employee_id=entry.employee_id)
            if e.work_date != entry.work_date
        ]
        return replace(entry, week_total=calculator.week_total([*others, entry], start, end))

    def _fresh(self, entry: Optional[TimeEntry]) -> Optional[TimeEntry]:
        if entry is None:
            return None
        return with_week_totals(self._entries, [entry], week_start_day=self._week_start_day)[0]

    def clock_in(self, employee_id: str, *, now: Optional[datetime] = None) -> TimeEntry:
        now = now or self._clock()
        existing = self._entries.find_open(employee_id) or self._entries.get(employee_id, now.date())
        entry = self._entries.create(state_machine.clock_in(existing, employee_id=employee_id, now=now))
        logger.info("Employee %s clocked in at %s", employee_id, now.isoformat())
        return self._fresh(entry)

    def start_break(self, employee_id: str, *, now: Optional[datetime] = None) -> TimeEntry:
        now = now or self._clock()
        entry = self._entries.find_open(employee_id)
        saved = save_transition(self._entries, entry, state_machine.start_break(entry, now=now))
        logger.info("Employee %s started a break at %s", employee_id, now.isoformat())
        return self._fresh(saved)

    def end_break(self, employee_id: str, *, now: Optional[datetime] = None) -> TimeEntry:
        now = now or self._clock()
        entry = self._entries.find_open(employee_id)
        updated = self._with_week_total(state_machine.end_break(entry, now=now))
        saved = save_transition(self._entries, entry, updated)
        logger.info("Employee %s ended a break at %s", employee_id, now.isoformat())
        return saved

    def clock_out(
        self,
        employee_id: str,
        *,
        now: Optional[datetime] = None,
        job_code: Optional[str] = None,
        rate: Optional[Decimal] = None,
        shift: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> TimeEntry:
        now = now or self._clock()
        entry = self._entries.find_open(employee_id)
        updated = state_machine.clock_out(entry, now=now, job_code=job_code, rate=rate, shift=shift, notes=notes)
        saved = save_transition(self._entries, entry, self._with_week_total(updated))
        logger.info(
            "Employee %s clocked out at %s (work=%s min, break=%s min)",
            employee_id,
            now.isoformat(),
            saved.total_work_time,
            saved.total_break_time,
        )
        return saved

    def get_entry(self, employee_id: str, work_date: date) -> TimeEntry:
        entry = self._entries.get(employee_id, work_date)
        if entry is None:
            raise NotFoundError(f"No time entry for {employee_id} on {work_date.isoformat()}")
        return self._fresh(entry)

    def submit(self, employee_id: str, work_date: date) -> TimeEntry:
        entry = self.get_entry(employee_id, work_date)
        saved = save_transition(self._entries, entry, state_machine.submit(entry))
        logger.info("Time entry %s/%s submitted for approval", employee_id, work_date.isoformat())
        return self._fresh(saved)

    def get_today(self, employee_id: str, today: Optional[date] = None) -> Optional[TimeEntry]:
        """Open entry if the employee is clocked in, otherwise today's entry."""

        today = today or self._clock().date()
        return self._fresh(self._entries.find_open(employee_id) or self._entries.get(employee_id, today))

    def list_entries(self, employee_id: str, *, start: date, end: date) -> Sequence[TimeEntry]:
        if end < start:
            raise ValidationError("End date must be on or after start date")
        entries = self._entries.list_entries(start_date=start, end_date=end, employee_id=employee_id)
        return with_week_totals(self._entries, entries, week_start_day=self._week_start_day)

    def period_bounds(self, period: SummaryPeriod | str, day: date) -> tuple[date, date]:
        try:
            period = SummaryPeriod(period)
        except ValueError:
            raise ValidationError(f"Invalid period specified: {period!r}")

        if period == SummaryPeriod.TODAY:
            return day, day
        if period == SummaryPeriod.WEEK:
            return calculator.week_bounds(day, self._week_start_day)
        last_day = calendar.monthrange(day.year, day.month)[1]
        return day.replace(day=1), day.replace(day=last_day)

    def entries_for_period(
        self,
        period: SummaryPeriod | str,
        *,
        now: Optional[datetime] = None,
        employee_id: Optional[str] = None,
    ) -> Sequence[TimeEntry]:
        now = now or self._clock()
        start, end = self.period_bounds(period, now.date())
        entries = self._entries.list_entries(start_date=start, end_date=end, employee_id=employee_id)
        return with_week_totals(self._entries, entries, week_start_day=self._week_start_day)

    def get_summary(self, employee_id: str, *, now: Optional[datetime] = None) -> TimeSummary:
        now = now or self._clock()
        today = now.date()
        month_start, month_end = self.period_bounds(SummaryPeriod.MONTH, today)
        week_start, week_end = self.period_bounds(SummaryPeriod.WEEK, today)

        fetched = self._entries.list_entries(
            start_date=min(month_start, week_start),
            end_date=max(month_end, week_end),
            employee_id=employee_id,
        )

        return TimeSummary(
            today=calculator.week_total(fetched, today, today),
            week=calculator.week_total(fetched, week_start, min(week_end, today)),
            month=calculator.week_total(fetched, month_start, today),
        )
