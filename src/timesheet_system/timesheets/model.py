from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import ExportFormat, TimeEntryStatus
from ..core.exceptions import ValidationError
from ..timeclock.model import Break


@dataclass(frozen=True)
class TimesheetRow:
    """Read-model consumed by every export renderer.

    Employee attributes are always filled (fallbacks are applied by the
    aggregator); optional entry fields stay None and are rendered as placeholders.
    """

    work_date: date
    employee_id: str
    employee_name: str
    department: str
    position: str
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    breaks: tuple[Break, ...]
    total_work_time: int
    total_break_time: int
    week_total: int
    job_code: Optional[str]
    rate: Optional[Decimal]
    shift: Optional[str]
    status: TimeEntryStatus
    employee_approval: bool
    manager_approval: bool
    approved_by: Optional[str]
    approved_by_name: Optional[str]
    approval_date: Optional[datetime]
    timesheet_notes: Optional[str]


@dataclass(frozen=True)
class TimesheetFilter:
    start_date: date
    end_date: date
    department: Optional[str] = None
    employee_id: Optional[str] = None
    status: Optional[TimeEntryStatus] = None

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValidationError("End date must be on or after start date")


@dataclass(frozen=True)
class ExportRequest:
    format: ExportFormat
    filter: TimesheetFilter

    @property
    def label(self) -> str:
        return f"{self.format.value} export for {self.filter.start_date.isoformat()} to {self.filter.end_date.isoformat()}"


@dataclass(frozen=True)
class TimesheetSummary:
    entry_count: int
    total_work_minutes: int
    total_break_minutes: int
    by_employee: list[dict] = field(default_factory=list)
    by_status: dict[str, int] = field(default_factory=dict)
