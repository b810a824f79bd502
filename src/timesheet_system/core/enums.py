from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Actor roles supplied by the identity provider."""

    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class TimeEntryStatus(str, Enum):
    """Lifecycle status of a single day's time entry."""

    OPEN = "open"
    CLOCKED_OUT = "clocked_out"
    PENDING_APPROVAL = "pending_approval"
    COMPLETED = "completed"
    APPROVED = "approved"
    REJECTED = "rejected"


class TimeEntryAction(str, Enum):
    CLOCK_IN = "clock_in"
    START_BREAK = "start_break"
    END_BREAK = "end_break"
    CLOCK_OUT = "clock_out"
    SUBMIT = "submit"
    EMPLOYEE_APPROVE = "employee_approve"
    MANAGER_APPROVE = "manager_approve"
    REJECT = "reject"
    REOPEN = "reopen"


class ExportFormat(str, Enum):
    CSV = "csv"
    SPREADSHEET = "spreadsheet"
    DOCUMENT = "document"


class SummaryPeriod(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
