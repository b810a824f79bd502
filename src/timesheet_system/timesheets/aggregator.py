from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, Optional, Sequence

from ..core.constants import DEFAULT_WEEK_START_DAY, PLACEHOLDER, UNKNOWN_EMPLOYEE
from ..core.exceptions import ExportCancelledError
from ..timeclock import calculator
from ..timeclock.model import TimeEntry
from ..timeclock.repository import TimeEntryRepository
from ..users.directory import EmployeeDirectory
from ..users.model import Employee
from .model import TimesheetFilter, TimesheetRow, TimesheetSummary

logger = logging.getLogger(__name__)

_UNKNOWN = Employee(employee_id="", name=UNKNOWN_EMPLOYEE, department=UNKNOWN_EMPLOYEE, position=UNKNOWN_EMPLOYEE)


class TimesheetAggregator:
    """Builds export-ready timesheet rows for a filter.

    Rows are ordered by work date, then employee name. Week totals are
    recomputed from the stored punches over the full company weeks the range
    touches, so they do not depend on what was cached at write time.
    """

    def __init__(
        self,
        entries: TimeEntryRepository,
        directory: EmployeeDirectory,
        *,
        week_start_day: int = DEFAULT_WEEK_START_DAY,
    ):
        self._entries = entries
        self._directory = directory
        self._week_start_day = int(week_start_day)

    def _lookup(self, employee_id: Optional[str], cache: dict[str, Employee]) -> Employee:
        if not employee_id:
            return _UNKNOWN
        if employee_id in cache:
            return cache[employee_id]
        try:
            employee = self._directory.get(employee_id)
        except Exception:
            logger.warning("Employee lookup failed for %s; using placeholder", employee_id, exc_info=True)
            employee = None
        if employee is None:
            logger.warning("Unknown employee reference %s in timesheet export", employee_id)
            employee = _UNKNOWN
        cache[employee_id] = employee
        return employee

    def _week_totals(self, flt: TimesheetFilter) -> dict[tuple[str, object], int]:
        week_start, _ = calculator.week_bounds(flt.start_date, self._week_start_day)
        _, week_end = calculator.week_bounds(flt.end_date, self._week_start_day)
        totals: dict[tuple[str, object], int] = defaultdict(int)
        for e in self._entries.list_entries(start_date=week_start, end_date=week_end, employee_id=flt.employee_id):
            key = (e.employee_id, calculator.week_bounds(e.work_date, self._week_start_day)[0])
            totals[key] += calculator.entry_work_minutes(e)
        return totals

    def _to_row(self, entry: TimeEntry, week_total: int, cache: dict[str, Employee]) -> TimesheetRow:
        employee = self._lookup(entry.employee_id, cache)
        approver_name = self._lookup(entry.approved_by, cache).name if entry.approved_by else None
        return TimesheetRow(
            work_date=entry.work_date,
            employee_id=entry.employee_id,
            employee_name=employee.name or UNKNOWN_EMPLOYEE,
            department=employee.department or PLACEHOLDER,
            position=employee.position or PLACEHOLDER,
            clock_in=entry.clock_in,
            clock_out=entry.clock_out,
            breaks=tuple(entry.breaks),
            total_work_time=calculator.entry_work_minutes(entry),
            total_break_time=calculator.total_break_minutes(entry.breaks),
            week_total=week_total,
            job_code=entry.job_code,
            rate=entry.rate,
            shift=entry.shift,
            status=entry.status,
            employee_approval=entry.employee_approval,
            manager_approval=entry.manager_approval,
            approved_by=entry.approved_by,
            approved_by_name=approver_name,
            approval_date=entry.approval_date,
            timesheet_notes=entry.timesheet_notes,
        )

    def build_rows(
        self,
        flt: TimesheetFilter,
        *,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> list[TimesheetRow]:
        entries = self._entries.list_entries(
            start_date=flt.start_date,
            end_date=flt.end_date,
            employee_id=flt.employee_id,
            status=flt.status,
        )
        week_totals = self._week_totals(flt)
        cache: dict[str, Employee] = {}

        rows: list[TimesheetRow] = []
        for entry in entries:
            if should_cancel and should_cancel():
                raise ExportCancelledError("Export was cancelled")
            week_key = (entry.employee_id, calculator.week_bounds(entry.work_date, self._week_start_day)[0])
            row = self._to_row(entry, week_totals.get(week_key, 0), cache)
            if flt.department and row.department != flt.department:
                continue
            rows.append(row)

        rows.sort(key=lambda r: (r.work_date, r.employee_name.casefold(), r.employee_id))
        logger.info("Built %d timesheet rows for %s..%s", len(rows), flt.start_date, flt.end_date)
        return rows

    @staticmethod
    def summarize(rows: Sequence[TimesheetRow]) -> TimesheetSummary:
        per_employee: dict[str, dict] = {}
        by_status: dict[str, int] = defaultdict(int)

        for r in rows:
            by_status[r.status.value] += 1
            s = per_employee.get(r.employee_id)
            if not s:
                s = {
                    "employee_id": r.employee_id,
                    "employee_name": r.employee_name,
                    "department": r.department,
                    "entries": 0,
                    "total_work_minutes": 0,
                    "total_break_minutes": 0,
                }
                per_employee[r.employee_id] = s
            s["entries"] += 1
            s["total_work_minutes"] += r.total_work_time
            s["total_break_minutes"] += r.total_break_time

        by_employee = sorted(per_employee.values(), key=lambda x: (-x["total_work_minutes"], x["employee_name"]))
        return TimesheetSummary(
            entry_count=len(rows),
            total_work_minutes=sum(r.total_work_time for r in rows),
            total_break_minutes=sum(r.total_break_time for r in rows),
            by_employee=by_employee,
            by_status=dict(by_status),
        )
