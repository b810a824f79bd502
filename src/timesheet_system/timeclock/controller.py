from __future__ import annotations

from dataclasses import asdict
from datetime import datetime

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import require_non_empty, require_rate
from ..common.web import current_actor, entry_to_dict, handle_domain_errors, login_required, manager_required
from ..container import Container
from ..core.exceptions import ValidationError
from .model import ScheduledWork


def _parse_time(value: str, field_name: str):
    try:
        return datetime.strptime(require_non_empty(value, field_name), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"{field_name} must be HH:MM")


def register(app: Flask, container: Container) -> None:
    svc = container.timeclock_service

    @app.route("/api/timeclock/clock-in", methods=["POST"], endpoint="clock_in")
    @login_required
    @handle_domain_errors
    def clock_in():
        entry = svc.clock_in(current_actor().employee_id)
        return jsonify({"success": True, "data": entry_to_dict(entry)}), 201

    @app.route("/api/timeclock/clock-out", methods=["POST"], endpoint="clock_out")
    @login_required
    @handle_domain_errors
    def clock_out():
        data = request.get_json(silent=True) or {}
        entry = svc.clock_out(
            current_actor().employee_id,
            job_code=(data.get("jobCode") or "").strip() or None,
            rate=require_rate(data.get("rate")),
            shift=(data.get("shift") or "").strip() or None,
            notes=(data.get("notes") or "").strip() or None,
        )
        return jsonify({"success": True, "data": entry_to_dict(entry)})

    @app.route("/api/timeclock/break/start", methods=["POST"], endpoint="start_break")
    @login_required
    @handle_domain_errors
    def start_break():
        entry = svc.start_break(current_actor().employee_id)
        return jsonify({"success": True, "data": entry_to_dict(entry)})

    @app.route("/api/timeclock/break/end", methods=["POST"], endpoint="end_break")
    @login_required
    @handle_domain_errors
    def end_break():
        entry = svc.end_break(current_actor().employee_id)
        return jsonify({"success": True, "data": entry_to_dict(entry)})

    @app.route("/api/timeclock/<work_date>/submit", methods=["POST"], endpoint="submit_timesheet")
    @login_required
    @handle_domain_errors
    def submit_timesheet(work_date: str):
        entry = svc.submit(current_actor().employee_id, parse_iso_date(work_date))
        return jsonify({"success": True, "data": entry_to_dict(entry)})

    @app.route("/api/timeclock/today", methods=["GET"], endpoint="today_entry")
    @login_required
    @handle_domain_errors
    def today_entry():
        entry = svc.get_today(current_actor().employee_id)
        return jsonify({"success": True, "data": entry_to_dict(entry) if entry else None})

    @app.route("/api/timeclock/summary", methods=["GET"], endpoint="time_summary")
    @login_required
    @handle_domain_errors
    def time_summary():
        summary = svc.get_summary(current_actor().employee_id)
        return jsonify({"success": True, "data": asdict(summary)})

    @app.route("/api/timeclock/entries", methods=["GET"], endpoint="time_entries")
    @login_required
    @handle_domain_errors
    def time_entries():
        start = parse_iso_date(request.args.get("startDate", ""))
        end = parse_iso_date(request.args.get("endDate", ""))
        entries = svc.list_entries(current_actor().employee_id, start=start, end=end)
        return jsonify({"success": True, "data": [entry_to_dict(e) for e in entries]})

    @app.route("/api/timeclock/period/<period>", methods=["GET"], endpoint="time_entries_by_period")
    @login_required
    @handle_domain_errors
    def time_entries_by_period(period: str):
        actor = current_actor()
        # managers see everyone; employees only themselves
        employee_id = None if actor.is_manager else actor.employee_id
        entries = svc.entries_for_period(period, employee_id=employee_id)
        return jsonify({"success": True, "data": [entry_to_dict(e) for e in entries]})

    @app.route("/api/timeclock/generate", methods=["POST"], endpoint="generate_timesheets")
    @manager_required
    @handle_domain_errors
    def generate_timesheets():
        data = request.get_json(silent=True) or {}
        scheduled = [
            ScheduledWork(
                employee_id=require_non_empty(str(item.get("employeeId") or ""), "employeeId"),
                work_date=parse_iso_date(str(item.get("date") or "")),
                start_time=_parse_time(str(item.get("startTime") or ""), "startTime"),
                end_time=_parse_time(str(item.get("endTime") or ""), "endTime"),
                job_code=item.get("jobCode"),
                rate=require_rate(item.get("rate")),
                shift=item.get("shift"),
                notes=item.get("notes"),
            )
            for item in data.get("scheduledWork") or []
        ]
        result = container.auto_timesheets.generate(scheduled, today=now_local().date())
        return jsonify(
            {
                "success": True,
                "data": {
                    "generated": [entry_to_dict(e) for e in result.generated],
                    "skipped": result.skipped,
                    "errors": result.errors,
                },
            }
        )
