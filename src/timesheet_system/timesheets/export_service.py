from __future__ import annotations

import logging
import re
import threading
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from ..common.datetime_utils import parse_iso_date
from ..core.constants import DEFAULT_EXPORT_JOB_TTL_SECONDS, DEFAULT_EXPORT_WORKERS
from ..core.enums import ExportFormat, TimeEntryStatus
from ..core.exceptions import ExportError, NotFoundError, ValidationError
from ..exports.base import ExportPayload
from ..exports.factory import RendererFactory
from .aggregator import TimesheetAggregator
from .model import ExportRequest, TimesheetFilter

logger = logging.getLogger(__name__)

_FILENAME_UNSAFE = re.compile(r"[^A-Za-z0-9_-]+")


def parse_export_request(params: Mapping[str, object]) -> ExportRequest:
    """Build an ExportRequest from query parameters.

    Recognized keys: format, startDate, endDate, department, status, employeeId.
    """
    raw_format = str(params.get("format") or "").strip().lower()
    try:
        fmt = ExportFormat(raw_format)
    except ValueError:
        raise ExportError(f"Unsupported export format: {raw_format!r}")

    start_s = str(params.get("startDate") or "")
    end_s = str(params.get("endDate") or "")
    if not start_s or not end_s:
        raise ValidationError("startDate and endDate are required")

    status_s = str(params.get("status") or "").strip()
    try:
        status = TimeEntryStatus(status_s) if status_s else None
    except ValueError:
        raise ValidationError(f"Unknown status: {status_s!r}")

    return ExportRequest(
        format=fmt,
        filter=TimesheetFilter(
            start_date=parse_iso_date(start_s),
            end_date=parse_iso_date(end_s),
            department=str(params.get("department") or "").strip() or None,
            employee_id=str(params.get("employeeId") or "").strip() or None,
            status=status,
        ),
    )


def export_filename(request: ExportRequest, extension: str) -> str:
    flt = request.filter
    name = f"timesheets_{flt.start_date.isoformat()}_to_{flt.end_date.isoformat()}"
    if flt.department:
        name += "_" + _FILENAME_UNSAFE.sub("-", flt.department).strip("-")
    return f"{name}.{extension}"


@dataclass
class ExportJob:
    """Handle on a background export."""

    request: ExportRequest
    future: Future
    cancel_event: threading.Event
    owner_id: Optional[str] = None
    created_at: float = field(default_factory=time.monotonic)

    def cancel(self) -> None:
        self.cancel_event.set()
        self.future.cancel()

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: Optional[float] = None) -> ExportPayload:
        return self.future.result(timeout=timeout)


class ExportJobRegistry:
    """In-process job table keyed by job id.

    Finished jobs nobody collected are dropped once they are older than
    ``ttl_seconds``; the sweep runs on every add/get/pop.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_EXPORT_JOB_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._jobs: dict[str, ExportJob] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def _sweep_locked(self) -> None:
        now = self._clock()
        expired = [job_id for job_id, job in self._jobs.items() if job.done() and now - job.created_at > self._ttl]
        for job_id in expired:
            del self._jobs[job_id]
        if expired:
            logger.info("Dropped %d uncollected export job(s)", len(expired))

    def sweep(self) -> None:
        with self._lock:
            self._sweep_locked()

    def add(self, job: ExportJob) -> str:
        job.created_at = self._clock()
        job_id = uuid.uuid4().hex
        with self._lock:
            self._sweep_locked()
            self._jobs[job_id] = job
        return job_id

    def get(self, job_id: str, *, owner_id: Optional[str]) -> ExportJob:
        """Job started by ``owner_id``; other callers get NotFoundError."""
        with self._lock:
            self._sweep_locked()
            job = self._jobs.get(job_id)
        if job is None or job.owner_id != owner_id:
            raise NotFoundError("Export job not found")
        return job

    def pop(self, job_id: str, *, owner_id: Optional[str]) -> ExportJob:
        with self._lock:
            self._sweep_locked()
            job = self._jobs.get(job_id)
            if job is None or job.owner_id != owner_id:
                raise NotFoundError("Export job not found")
            return self._jobs.pop(job_id)


class TimesheetExportService:
    def __init__(
        self,
        aggregator: TimesheetAggregator,
        *,
        renderers: Optional[RendererFactory] = None,
        max_workers: int = DEFAULT_EXPORT_WORKERS,
        jobs: Optional[ExportJobRegistry] = None,
    ):
        self._aggregator = aggregator
        self._renderers = renderers or RendererFactory()
        self._max_workers = int(max_workers)
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()
        self.jobs = jobs or ExportJobRegistry()

    def export(self, request: ExportRequest, *, should_cancel: Optional[Callable[[], bool]] = None) -> ExportPayload:
        renderer = self._renderers.for_format(request.format)
        rows = self._aggregator.build_rows(request.filter, should_cancel=should_cancel)

        try:
            content = renderer.render(rows, should_cancel=should_cancel)
        except ExportError:
            raise
        except Exception:
            logger.exception("Renderer failed for %s", request.label)
            raise ExportError(f"Could not generate {request.label}") from None

        logger.info("Generated %s (%d rows, %d bytes)", request.label, len(rows), len(content))
        return ExportPayload(
            content=content,
            mime_type=renderer.mime_type,
            filename=export_filename(request, renderer.extension),
        )

    def export_single(self, employee_id: str, work_date: date) -> ExportPayload:
        """One-timesheet workbook for a single employee and date."""
        rows = self._aggregator.build_rows(
            TimesheetFilter(start_date=work_date, end_date=work_date, employee_id=employee_id)
        )
        if not rows:
            raise NotFoundError(f"No time entry for {employee_id} on {work_date.isoformat()}")

        renderer = self._renderers.for_format(ExportFormat.SPREADSHEET)
        try:
            content = renderer.render_single(rows[0])
        except Exception:
            logger.exception("Renderer failed for timesheet %s/%s", employee_id, work_date)
            raise ExportError(f"Could not generate spreadsheet for {work_date.isoformat()}") from None

        safe_id = _FILENAME_UNSAFE.sub("-", employee_id).strip("-")
        return ExportPayload(
            content=content,
            mime_type=renderer.mime_type,
            filename=f"timesheet_{safe_id}_{work_date.isoformat()}.{renderer.extension}",
        )

    def submit(self, request: ExportRequest, *, owner_id: Optional[str] = None) -> ExportJob:
        """Run ``export`` on a worker thread; the job can be cancelled between rows."""
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="timesheet-export")
            executor = self._executor

        cancel_event = threading.Event()
        future = executor.submit(self.export, request, should_cancel=cancel_event.is_set)
        return ExportJob(request=request, future=future, cancel_event=cancel_event, owner_id=owner_id)

    def shutdown(self, *, wait: bool = True) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)
