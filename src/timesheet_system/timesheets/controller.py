from __future__ import annotations

import io
from dataclasses import asdict

from flask import Flask, jsonify, request, send_file

from ..common.datetime_utils import parse_iso_date
from ..common.web import current_actor, handle_domain_errors, login_required
from ..container import Container
from ..core.exceptions import AuthorizationError, ExportError
from ..exports.base import ExportPayload
from ..exports.sections import display, table_record
from .export_service import parse_export_request


def register(app: Flask, container: Container) -> None:
    exports = container.export_service
    jobs = exports.jobs

    def _scoped_params() -> dict:
        params = request.args.to_dict()
        actor = current_actor()
        if not actor.is_manager:
            params["employeeId"] = actor.employee_id
        return params

    def _send(payload: ExportPayload):
        return send_file(
            io.BytesIO(payload.content),
            mimetype=payload.mime_type,
            as_attachment=True,
            download_name=payload.filename,
        )

    @app.route("/api/timesheets/export", methods=["GET"], endpoint="export_timesheets")
    @login_required
    @handle_domain_errors
    def export_timesheets():
        payload = exports.export(parse_export_request(_scoped_params()))
        return _send(payload)

    @app.route("/api/timesheets/report", methods=["GET"], endpoint="timesheet_report")
    @login_required
    @handle_domain_errors
    def timesheet_report():
        params = {"format": "csv", **_scoped_params()}
        req = parse_export_request(params)
        rows = container.aggregator.build_rows(req.filter)
        summary = container.aggregator.summarize(rows)
        return jsonify(
            {
                "success": True,
                "data": {
                    "rows": [{k: display(v) for k, v in table_record(r).items()} for r in rows],
                    "summary": asdict(summary),
                },
            }
        )

    @app.route("/api/timesheets/exports", methods=["POST"], endpoint="start_export_job")
    @login_required
    @handle_domain_errors
    def start_export_job():
        job = exports.submit(parse_export_request(_scoped_params()), owner_id=current_actor().employee_id)
        job_id = jobs.add(job)
        return jsonify({"success": True, "data": {"jobId": job_id}}), 202

    @app.route("/api/timesheets/exports/<job_id>", methods=["GET"], endpoint="get_export_job")
    @login_required
    @handle_domain_errors
    def get_export_job(job_id: str):
        owner_id = current_actor().employee_id
        job = jobs.get(job_id, owner_id=owner_id)
        if not job.done():
            return jsonify({"success": True, "data": {"jobId": job_id, "status": "running"}}), 202
        jobs.pop(job_id, owner_id=owner_id)
        if job.future.cancelled():
            raise ExportError(f"{job.request.label} was cancelled")
        return _send(job.result())

    @app.route("/api/timesheets/exports/<job_id>", methods=["DELETE"], endpoint="cancel_export_job")
    @login_required
    @handle_domain_errors
    def cancel_export_job(job_id: str):
        job = jobs.pop(job_id, owner_id=current_actor().employee_id)
        job.cancel()
        return jsonify({"success": True, "data": {"jobId": job_id, "status": "cancelled"}})

    @app.route("/api/timesheets/<employee_id>/<work_date>/export", methods=["GET"], endpoint="export_single_timesheet")
    @login_required
    @handle_domain_errors
    def export_single_timesheet(employee_id: str, work_date: str):
        actor = current_actor()
        if not actor.is_manager and actor.employee_id != employee_id:
            raise AuthorizationError("You can only export your own timesheet")
        return _send(exports.export_single(employee_id, parse_iso_date(work_date)))
