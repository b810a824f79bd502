import csv
import io
import threading
from concurrent.futures import Future
from datetime import date, datetime

import pytest

from timesheet_system.core.enums import ExportFormat, TimeEntryStatus
from timesheet_system.core.exceptions import ExportCancelledError, ExportError, NotFoundError, ValidationError
from timesheet_system.exports.csv_renderer import CSVTimesheetRenderer
from timesheet_system.exports.factory import RendererFactory
from timesheet_system.timeclock.model import TimeEntry
from timesheet_system.timesheets.aggregator import TimesheetAggregator
from timesheet_system.timesheets.export_service import (
    ExportJob,
    ExportJobRegistry,
    TimesheetExportService,
    export_filename,
    parse_export_request,
)


def _params(**overrides):
    params = {"format": "csv", "startDate": "2026-02-01", "endDate": "2026-02-07"}
    params.update(overrides)
    return params


@pytest.fixture
def aggregator(entries, directory):
    entries.put(
        TimeEntry(
            employee_id="E001",
            work_date=date(2026, 2, 2),
            clock_in=datetime(2026, 2, 2, 9),
            clock_out=datetime(2026, 2, 2, 17),
            status=TimeEntryStatus.CLOCKED_OUT,
        )
    )
    return TimesheetAggregator(entries, directory)


def test_parse_export_request():
    req = parse_export_request(_params(format="Spreadsheet", department=" Operations ", status="approved"))

    assert req.format == ExportFormat.SPREADSHEET
    assert req.filter.start_date == date(2026, 2, 1)
    assert req.filter.department == "Operations"
    assert req.filter.status == TimeEntryStatus.APPROVED
    assert req.filter.employee_id is None


@pytest.mark.parametrize(
    "params,error",
    [
        (_params(format="docx"), ExportError),
        (_params(format=""), ExportError),
        (_params(startDate=""), ValidationError),
        (_params(endDate="02/07/2026"), ValidationError),
        (_params(status="lost"), ValidationError),
        (_params(startDate="2026-02-08"), ValidationError),
    ],
)
def test_parse_export_request_rejects_bad_input(params, error):
    with pytest.raises(error):
        parse_export_request(params)


def test_export_filename_includes_sanitized_department():
    req = parse_export_request(_params(department="Sales & Ops"))

    assert export_filename(req, "csv") == "timesheets_2026-02-01_to_2026-02-07_Sales-Ops.csv"
    assert export_filename(parse_export_request(_params()), "pdf") == "timesheets_2026-02-01_to_2026-02-07.pdf"


def test_export_returns_payload(aggregator):
    payload = TimesheetExportService(aggregator).export(parse_export_request(_params()))

    assert payload.mime_type == "text/csv"
    assert payload.filename.endswith(".csv")
    lines = list(csv.reader(io.StringIO(payload.content.decode("utf-8-sig"))))
    assert len(lines) == 2
    assert lines[1][1] == "Alice Nguyen"


def test_unexpected_renderer_failure_becomes_export_error(aggregator):
    class BrokenRenderer(CSVTimesheetRenderer):
        def render(self, rows, *, should_cancel=None):
            raise RuntimeError("disk full")

    service = TimesheetExportService(aggregator, renderers=RendererFactory({ExportFormat.CSV: BrokenRenderer()}))

    with pytest.raises(ExportError, match="Could not generate csv export"):
        service.export(parse_export_request(_params()))


def test_unregistered_format_is_rejected(aggregator):
    service = TimesheetExportService(aggregator, renderers=RendererFactory({ExportFormat.CSV: CSVTimesheetRenderer()}))

    with pytest.raises(ExportError, match="Unsupported export format"):
        service.export(parse_export_request(_params(format="document")))


def test_background_export(aggregator):
    service = TimesheetExportService(aggregator, max_workers=1)
    try:
        job = service.submit(parse_export_request(_params(format="spreadsheet")))
        payload = job.result(timeout=30)
    finally:
        service.shutdown()

    assert job.done()
    assert payload.content[:2] == b"PK"
    assert payload.filename.endswith(".xlsx")


def test_background_export_can_be_cancelled(aggregator):
    started = threading.Event()
    release = threading.Event()

    class SlowRenderer(CSVTimesheetRenderer):
        def render(self, rows, *, should_cancel=None):
            started.set()
            release.wait(10)
            return super().render(rows, should_cancel=should_cancel)

    service = TimesheetExportService(aggregator, renderers=RendererFactory({ExportFormat.CSV: SlowRenderer()}))
    try:
        job = service.submit(parse_export_request(_params()))
        assert started.wait(10)
        job.cancel()
        release.set()
        with pytest.raises(ExportCancelledError):
            job.result(timeout=10)
    finally:
        release.set()
        service.shutdown()


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _job(owner_id="E001", finished=True) -> ExportJob:
    future = Future()
    if finished:
        future.set_result(b"")
    return ExportJob(
        request=parse_export_request(_params()),
        future=future,
        cancel_event=threading.Event(),
        owner_id=owner_id,
    )


def test_uncollected_finished_job_is_dropped_after_ttl():
    clock = FakeClock()
    jobs = ExportJobRegistry(ttl_seconds=60, clock=clock)
    abandoned = jobs.add(_job())
    still_running = jobs.add(_job(finished=False))

    clock.now += 30
    assert jobs.get(abandoned, owner_id="E001").done()

    clock.now += 31
    jobs.sweep()

    assert len(jobs) == 1
    with pytest.raises(NotFoundError):
        jobs.get(abandoned, owner_id="E001")
    assert not jobs.get(still_running, owner_id="E001").done()


def test_jobs_are_only_visible_to_their_owner():
    jobs = ExportJobRegistry()
    job_id = jobs.add(_job(owner_id="E001"))

    with pytest.raises(NotFoundError):
        jobs.get(job_id, owner_id="E002")
    with pytest.raises(NotFoundError):
        jobs.pop(job_id, owner_id="E002")

    assert jobs.pop(job_id, owner_id="E001").owner_id == "E001"
    assert len(jobs) == 0


def test_submit_records_the_owner(aggregator):
    service = TimesheetExportService(aggregator, max_workers=1)
    try:
        job = service.submit(parse_export_request(_params()), owner_id="M001")
        job.result(timeout=30)
    finally:
        service.shutdown()

    assert job.owner_id == "M001"


def test_export_single_timesheet(aggregator):
    payload = TimesheetExportService(aggregator).export_single("E001", date(2026, 2, 2))

    assert payload.filename == "timesheet_E001_2026-02-02.xlsx"
    assert payload.content[:2] == b"PK"
    with pytest.raises(NotFoundError):
        TimesheetExportService(aggregator).export_single("E001", date(2026, 2, 3))
