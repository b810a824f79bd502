from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import current_actor, entry_to_dict, handle_domain_errors, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    workflow = container.approval_workflow

    # Role checks are enforced by ApprovalWorkflow (AuthorizationError -> 403).

    @app.route("/api/timesheets/<employee_id>/<work_date>/employee-approve", methods=["POST"], endpoint="employee_approve")
    @login_required
    @handle_domain_errors
    def employee_approve(employee_id: str, work_date: str):
        entry = workflow.employee_approve(current_actor(), employee_id=employee_id, work_date=parse_iso_date(work_date))
        return jsonify({"success": True, "data": entry_to_dict(entry)})

    @app.route("/api/timesheets/<employee_id>/<work_date>/manager-approve", methods=["POST"], endpoint="manager_approve")
    @login_required
    @handle_domain_errors
    def manager_approve(employee_id: str, work_date: str):
        entry = workflow.manager_approve(current_actor(), employee_id=employee_id, work_date=parse_iso_date(work_date))
        return jsonify({"success": True, "data": entry_to_dict(entry)})

    @app.route("/api/timesheets/<employee_id>/<work_date>/reject", methods=["POST"], endpoint="reject_timesheet")
    @login_required
    @handle_domain_errors
    def reject_timesheet(employee_id: str, work_date: str):
        data = request.get_json(silent=True) or {}
        entry = workflow.reject(
            current_actor(),
            employee_id=employee_id,
            work_date=parse_iso_date(work_date),
            note=data.get("note") or "",
        )
        return jsonify({"success": True, "data": entry_to_dict(entry)})

    @app.route("/api/timesheets/<employee_id>/<work_date>/reopen", methods=["POST"], endpoint="reopen_timesheet")
    @login_required
    @handle_domain_errors
    def reopen_timesheet(employee_id: str, work_date: str):
        entry = workflow.reopen(current_actor(), employee_id=employee_id, work_date=parse_iso_date(work_date))
        return jsonify({"success": True, "data": entry_to_dict(entry)})
