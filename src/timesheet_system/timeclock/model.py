from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from ..core.enums import TimeEntryStatus


@dataclass(frozen=True)
class Break:
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[int] = None  # minutes, None while open

    @property
    def is_open(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class TimeEntry:
    """Domain entity: one employee's time entry for one work date.

    Note: Instances are immutable. Transitions build a new entry, so a failed
    transition never leaves a half-updated record behind.
    """

    employee_id: str
    work_date: date
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    breaks: tuple[Break, ...] = ()

    total_work_time: int = 0
    total_break_time: int = 0
    week_total: int = 0

    job_code: Optional[str] = None
    rate: Optional[Decimal] = None
    shift: Optional[str] = None

    status: TimeEntryStatus = TimeEntryStatus.OPEN
    employee_approval: bool = False
    manager_approval: bool = False
    approved_by: Optional[str] = None
    approval_date: Optional[datetime] = None
    timesheet_notes: Optional[str] = None

    version: int = 0

    @property
    def open_break(self) -> Optional[Break]:
        if self.breaks and self.breaks[-1].is_open:
            return self.breaks[-1]
        return None

    @property
    def is_on_break(self) -> bool:
        return self.open_break is not None


@dataclass(frozen=True)
class ScheduledWork:
    """Scheduled shift handed over by the scheduling module."""

    employee_id: str
    work_date: date
    start_time: time
    end_time: time
    job_code: Optional[str] = None
    rate: Optional[Decimal] = None
    shift: Optional[str] = None
    notes: Optional[str] = None
