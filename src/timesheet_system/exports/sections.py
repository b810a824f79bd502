"""Shared projection of a TimesheetRow into labeled values.

Every renderer goes through these helpers so the three formats show the same
information: ``table_record`` for flat one-line-per-timesheet layouts and
``build_sections`` for the per-timesheet section layout.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from ..core.constants import PLACEHOLDER
from ..timesheets.model import TimesheetRow

TABLE_COLUMNS = [
    "Date",
    "Employee Name",
    "Employee ID",
    "Department",
    "Position",
    "Clock In",
    "Clock Out",
    "Total Work Time (min)",
    "Total Break Time (min)",
    "Week Total (min)",
    "Job Code",
    "Rate",
    "Shift",
    "Status",
    "Employee Approval",
    "Manager Approval",
    "Approval Date",
    "Approved By",
    "Notes",
]


@dataclass(frozen=True)
class Section:
    title: str
    items: list[tuple[str, Any]]


def fmt_date(value: Optional[date]) -> Optional[str]:
    return value.strftime("%Y-%m-%d") if value else None


def fmt_time(value: Optional[datetime]) -> Optional[str]:
    return value.strftime("%H:%M:%S") if value else None


def fmt_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else None


def rate_number(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def display(value: Any) -> str:
    """Text form of a typed value; missing values become the placeholder."""
    if value is None or value == "":
        return PLACEHOLDER
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def table_record(row: TimesheetRow) -> dict[str, Any]:
    return {
        "Date": fmt_date(row.work_date),
        "Employee Name": row.employee_name,
        "Employee ID": row.employee_id,
        "Department": row.department,
        "Position": row.position,
        "Clock In": fmt_time(row.clock_in),
        "Clock Out": fmt_time(row.clock_out),
        "Total Work Time (min)": int(row.total_work_time),
        "Total Break Time (min)": int(row.total_break_time),
        "Week Total (min)": int(row.week_total),
        "Job Code": row.job_code,
        "Rate": rate_number(row.rate),
        "Shift": row.shift,
        "Status": row.status.value,
        "Employee Approval": yes_no(row.employee_approval),
        "Manager Approval": yes_no(row.manager_approval),
        "Approval Date": fmt_datetime(row.approval_date),
        "Approved By": row.approved_by_name,
        "Notes": row.timesheet_notes,
    }


def build_sections(row: TimesheetRow) -> list[Section]:
    """Sections of a single timesheet; Break Details and Notes only when present."""
    sections = [
        Section(
            "Employee Information",
            [
                ("Name", row.employee_name),
                ("Employee ID", row.employee_id),
                ("Department", row.department),
                ("Position", row.position),
            ],
        ),
        Section(
            "Timesheet Details",
            [
                ("Date", fmt_date(row.work_date)),
                ("Clock In", fmt_time(row.clock_in)),
                ("Clock Out", fmt_time(row.clock_out)),
                ("Total Work Time (min)", int(row.total_work_time)),
                ("Total Break Time (min)", int(row.total_break_time)),
                ("Week Total (min)", int(row.week_total)),
                ("Job Code", row.job_code),
                ("Rate", rate_number(row.rate)),
                ("Shift", row.shift),
            ],
        ),
    ]

    if row.breaks:
        items: list[tuple[str, Any]] = []
        for i, b in enumerate(row.breaks, start=1):
            items.append((f"Break {i} Start", fmt_time(b.start_time)))
            items.append((f"Break {i} End", fmt_time(b.end_time)))
            items.append((f"Break {i} Duration (min)", b.duration))
        sections.append(Section("Break Details", items))

    if row.timesheet_notes:
        sections.append(Section("Notes", [("Comments", row.timesheet_notes)]))

    sections.append(
        Section(
            "Approval Information",
            [
                ("Status", row.status.value),
                ("Employee Approval", yes_no(row.employee_approval)),
                ("Manager Approval", yes_no(row.manager_approval)),
                ("Approved By", row.approved_by_name),
                ("Approval Date", fmt_datetime(row.approval_date)),
            ],
        )
    )
    return sections
