"""Helpers shared by the Flask controllers (JSON API)."""

from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ConcurrentModificationError,
    DomainError,
    ExportError,
    NotFoundError,
    StateError,
    ValidationError,
)
from ..timeclock.model import TimeEntry
from ..users.model import Actor

logger = logging.getLogger(__name__)

_STATUS_CODES = [
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConcurrentModificationError, 409),
    (StateError, 400),
    (ValidationError, 400),
    (ExportError, 400),
]


def current_actor() -> Actor:
    """Actor of the authenticated session (set by the external auth layer)."""
    return Actor(employee_id=str(session["employee_id"]), role=Role(session.get("role", Role.EMPLOYEE.value)))


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return jsonify({"success": False, "message": "Please log in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def manager_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return jsonify({"success": False, "message": "Please log in to continue"}), 401
        if session.get("role") not in {Role.MANAGER.value, Role.ADMIN.value}:
            return jsonify({"success": False, "message": "Managers only"}), 403
        return view(*args, **kwargs)

    return wrapper


def error_response(exc: DomainError):
    for exc_type, code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return jsonify({"success": False, "error": type(exc).__name__, "message": str(exc)}), code
    return jsonify({"success": False, "error": type(exc).__name__, "message": str(exc)}), 400


def handle_domain_errors(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            logger.info("%s rejected: %s", view.__name__, e)
            return error_response(e)

    return wrapper


def entry_to_dict(entry: TimeEntry) -> dict:
    return {
        "employeeId": entry.employee_id,
        "date": entry.work_date.isoformat(),
        "clockIn": entry.clock_in.isoformat() if entry.clock_in else None,
        "clockOut": entry.clock_out.isoformat() if entry.clock_out else None,
        "breaks": [
            {
                "startTime": b.start_time.isoformat(),
                "endTime": b.end_time.isoformat() if b.end_time else None,
                "duration": b.duration,
            }
            for b in entry.breaks
        ],
        "onBreak": entry.is_on_break,
        "totalWorkTime": entry.total_work_time,
        "totalBreakTime": entry.total_break_time,
        "weekTotal": entry.week_total,
        "jobCode": entry.job_code,
        "rate": str(entry.rate) if entry.rate is not None else None,
        "shift": entry.shift,
        "status": entry.status.value,
        "employeeApproval": entry.employee_approval,
        "managerApproval": entry.manager_approval,
        "approvedBy": entry.approved_by,
        "approvalDate": entry.approval_date.isoformat() if entry.approval_date else None,
        "timesheetNotes": entry.timesheet_notes,
    }
