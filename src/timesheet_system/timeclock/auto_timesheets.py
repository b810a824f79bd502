"""Turn elapsed scheduled work into completed time entries.

Externally triggered (admin endpoint or a cron job calling the service); there
is no background scheduler in this package.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Iterable

from ..core.constants import DEFAULT_JOB_CODE, DEFAULT_WEEK_START_DAY
from ..core.enums import TimeEntryStatus
from ..core.exceptions import DomainError, DuplicateClockInError, ValidationError
from . import calculator
from .model import ScheduledWork, TimeEntry
from .repository import TimeEntryRepository
from .service import with_week_totals

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    generated: list[TimeEntry] = field(default_factory=list)
    skipped: list[dict] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)


class AutoTimesheetGenerator:
    def __init__(self, entries: TimeEntryRepository, *, week_start_day: int = DEFAULT_WEEK_START_DAY):
        self._entries = entries
        self._week_start_day = int(week_start_day)

    @staticmethod
    def build_entry(work: ScheduledWork) -> TimeEntry:
        clock_in = datetime.combine(work.work_date, work.start_time)
        clock_out = datetime.combine(work.work_date, work.end_time)
        minutes = calculator.total_work_minutes(clock_in, clock_out, ())
        return TimeEntry(
            employee_id=work.employee_id,
            work_date=work.work_date,
            clock_in=clock_in,
            clock_out=clock_out,
            total_work_time=minutes,
            total_break_time=0,
            job_code=work.job_code or DEFAULT_JOB_CODE,
            rate=work.rate,
            shift=work.shift,
            status=TimeEntryStatus.COMPLETED,
            timesheet_notes=f"Auto-generated from scheduled work: {work.notes or 'No notes'}",
        )

    def generate(self, scheduled: Iterable[ScheduledWork], *, today: date) -> GenerationResult:
        result = GenerationResult()

        for work in scheduled:
            ref = {"employee_id": work.employee_id, "work_date": work.work_date.isoformat()}
            if work.work_date > today:
                result.skipped.append({**ref, "reason": "Scheduled work has not happened yet"})
                continue
            if self._entries.get(work.employee_id, work.work_date) is not None:
                result.skipped.append({**ref, "reason": "Timesheet already exists"})
                continue

            try:
                if work.end_time <= work.start_time:
                    raise ValidationError("Scheduled end time must be after start time")
                (entry,) = with_week_totals(self._entries, [self.build_entry(work)], week_start_day=self._week_start_day)
                # the new entry is not stored yet, so add its own minutes
                entry = self._entries.create(replace(entry, week_total=entry.week_total + entry.total_work_time))
            except DuplicateClockInError:
                result.skipped.append({**ref, "reason": "Timesheet already exists"})
                continue
            except DomainError as e:
                logger.warning("Could not generate timesheet for %s on %s: %s", work.employee_id, work.work_date, e)
                result.errors.append({**ref, "error": str(e)})
                continue

            result.generated.append(entry)

        result.generated = with_week_totals(self._entries, result.generated, week_start_day=self._week_start_day)
        logger.info(
            "Automatic timesheet generation: generated=%d skipped=%d errors=%d",
            len(result.generated),
            len(result.skipped),
            len(result.errors),
        )
        return result
