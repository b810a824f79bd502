"""Lifecycle of a single day's time entry.

Every transition is a pure function ``(entry, ...) -> new entry``. Guards run
before anything is built, and derived totals are recomputed in the same step, so
callers either get a fully updated entry or an exception.

The state machine is role-agnostic; who may call what is decided by
``approvals.service.ApprovalWorkflow``.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.constants import DEFAULT_JOB_CODE, NOTES_MAX_LENGTH
from ..core.enums import TimeEntryAction, TimeEntryStatus
from ..core.exceptions import (
    BreakAlreadyOpenError,
    DuplicateClockInError,
    InvalidIntervalError,
    InvalidStateError,
    NoActiveShiftError,
    NoOpenBreakError,
)
from ..common.validators import require_max_length
from . import calculator
from .model import Break, TimeEntry

S = TimeEntryStatus
A = TimeEntryAction

# action -> (allowed source statuses, target status or None when status is unchanged)
TRANSITIONS: dict[TimeEntryAction, tuple[frozenset[TimeEntryStatus], Optional[TimeEntryStatus]]] = {
    A.START_BREAK: (frozenset({S.OPEN}), None),
    A.END_BREAK: (frozenset({S.OPEN}), None),
    A.CLOCK_OUT: (frozenset({S.OPEN}), S.CLOCKED_OUT),
    A.SUBMIT: (frozenset({S.CLOCKED_OUT}), S.PENDING_APPROVAL),
    A.EMPLOYEE_APPROVE: (frozenset({S.PENDING_APPROVAL, S.COMPLETED}), None),
    A.MANAGER_APPROVE: (frozenset({S.PENDING_APPROVAL, S.COMPLETED}), None),
    A.REJECT: (frozenset({S.PENDING_APPROVAL, S.COMPLETED}), S.REJECTED),
    A.REOPEN: (frozenset({S.REJECTED}), S.CLOCKED_OUT),
}

PUNCH_ACTIONS = frozenset({A.CLOCK_IN, A.START_BREAK, A.END_BREAK, A.CLOCK_OUT})


def can_apply(action: TimeEntryAction, status: TimeEntryStatus) -> bool:
    allowed, _ = TRANSITIONS.get(action, (frozenset(), None))
    return status in allowed


def _target(action: TimeEntryAction) -> TimeEntryStatus:
    return TRANSITIONS[action][1]


def _require(action: TimeEntryAction, entry: TimeEntry) -> None:
    if can_apply(action, entry.status):
        return
    if action in PUNCH_ACTIONS:
        raise NoActiveShiftError("No active clock-in found")
    raise InvalidStateError(f"Cannot {action.value.replace('_', ' ')} a time entry that is {entry.status.value}")


def _with_totals(entry: TimeEntry) -> TimeEntry:
    return replace(
        entry,
        total_break_time=calculator.total_break_minutes(entry.breaks),
        total_work_time=calculator.total_work_minutes(entry.clock_in, entry.clock_out, entry.breaks),
    )


def _last_punch(entry: TimeEntry) -> datetime:
    last = entry.clock_in
    for b in entry.breaks:
        last = max(last, b.end_time or b.start_time)
    return last


def clock_in(existing: Optional[TimeEntry], *, employee_id: str, now: datetime, work_date: Optional[date] = None) -> TimeEntry:
    if existing is not None:
        if existing.status == S.OPEN:
            raise DuplicateClockInError("You are already clocked in")
        raise DuplicateClockInError(f"A time entry already exists for {existing.work_date.isoformat()}")
    return TimeEntry(
        employee_id=employee_id,
        work_date=work_date or now.date(),
        clock_in=now,
        status=S.OPEN,
    )


def start_break(entry: Optional[TimeEntry], *, now: datetime) -> TimeEntry:
    if entry is None:
        raise NoActiveShiftError("No active clock-in found")
    _require(A.START_BREAK, entry)
    if entry.is_on_break:
        raise BreakAlreadyOpenError("A break is already open")
    if now < _last_punch(entry):
        raise InvalidIntervalError("A break cannot start before the previous punch")
    return replace(entry, breaks=entry.breaks + (Break(start_time=now),))


def _close_open_break(entry: TimeEntry, now: datetime) -> tuple[Break, ...]:
    open_break = entry.open_break
    closed = replace(open_break, end_time=now, duration=calculator.duration_minutes(open_break.start_time, now))
    return entry.breaks[:-1] + (closed,)


def end_break(entry: Optional[TimeEntry], *, now: datetime) -> TimeEntry:
    if entry is None:
        raise NoActiveShiftError("No active clock-in found")
    _require(A.END_BREAK, entry)
    if not entry.is_on_break:
        raise NoOpenBreakError("No open break found")
    return _with_totals(replace(entry, breaks=_close_open_break(entry, now)))


def clock_out(
    entry: Optional[TimeEntry],
    *,
    now: datetime,
    job_code: Optional[str] = None,
    rate: Optional[Decimal] = None,
    shift: Optional[str] = None,
    notes: Optional[str] = None,
) -> TimeEntry:
    if entry is None:
        raise NoActiveShiftError("No active clock-in found")
    _require(A.CLOCK_OUT, entry)
    if now <= entry.clock_in:
        raise InvalidIntervalError("Clock-out must be after clock-in")
    if now < _last_punch(entry):
        raise InvalidIntervalError("Clock-out cannot be before the last break punch")
    require_max_length(notes, "Notes", NOTES_MAX_LENGTH)

    breaks = _close_open_break(entry, now) if entry.is_on_break else entry.breaks
    return _with_totals(
        replace(
            entry,
            clock_out=now,
            breaks=breaks,
            status=_target(A.CLOCK_OUT),
            job_code=job_code or entry.job_code or DEFAULT_JOB_CODE,
            rate=rate if rate is not None else entry.rate,
            shift=shift or entry.shift,
            timesheet_notes=notes if notes is not None else entry.timesheet_notes,
        )
    )


def submit(entry: TimeEntry) -> TimeEntry:
    _require(A.SUBMIT, entry)
    return replace(entry, status=_target(A.SUBMIT))


def _finalize_if_ready(entry: TimeEntry, *, now: datetime, require_employee_approval: bool) -> TimeEntry:
    ready = entry.manager_approval and (entry.employee_approval or not require_employee_approval)
    if not ready:
        return entry
    return replace(entry, status=S.APPROVED, approval_date=now)


def employee_approve(entry: TimeEntry, *, now: datetime, require_employee_approval: bool = True) -> TimeEntry:
    _require(A.EMPLOYEE_APPROVE, entry)
    approved = replace(entry, employee_approval=True)
    return _finalize_if_ready(approved, now=now, require_employee_approval=require_employee_approval)


def manager_approve(
    entry: TimeEntry,
    *,
    approver_id: str,
    now: datetime,
    require_employee_approval: bool = True,
) -> TimeEntry:
    _require(A.MANAGER_APPROVE, entry)
    approved = replace(entry, manager_approval=True, approved_by=approver_id)
    return _finalize_if_ready(approved, now=now, require_employee_approval=require_employee_approval)


def reject(entry: TimeEntry, *, approver_id: str, note: Optional[str]) -> TimeEntry:
    _require(A.REJECT, entry)
    require_max_length(note, "Notes", NOTES_MAX_LENGTH)
    return replace(entry, status=_target(A.REJECT), approved_by=approver_id, timesheet_notes=note)


def reopen(entry: TimeEntry) -> TimeEntry:
    _require(A.REOPEN, entry)
    return replace(
        entry,
        status=_target(A.REOPEN),
        employee_approval=False,
        manager_approval=False,
        approved_by=None,
        approval_date=None,
    )
