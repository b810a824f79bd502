from __future__ import annotations

from dataclasses import dataclass

from .approvals.service import ApprovalWorkflow
from .core.constants import DEFAULT_EXPORT_JOB_TTL_SECONDS, DEFAULT_EXPORT_WORKERS, DEFAULT_WEEK_START_DAY
from .database.connection import DBConfig, DatabaseConnection
from .timeclock.auto_timesheets import AutoTimesheetGenerator
from .timeclock.mysql_time_entry_repository import MySQLTimeEntryRepository
from .timeclock.repository import TimeEntryRepository
from .timeclock.service import TimeClockService
from .timesheets.aggregator import TimesheetAggregator
from .timesheets.export_service import ExportJobRegistry, TimesheetExportService
from .users.directory import EmployeeDirectory
from .users.mysql_employee_directory import MySQLEmployeeDirectory


@dataclass(frozen=True)
class Container:
    entries_repo: TimeEntryRepository
    directory: EmployeeDirectory

    timeclock_service: TimeClockService
    approval_workflow: ApprovalWorkflow
    auto_timesheets: AutoTimesheetGenerator
    aggregator: TimesheetAggregator
    export_service: TimesheetExportService


def build_services(
    entries_repo: TimeEntryRepository,
    directory: EmployeeDirectory,
    *,
    week_start_day: int = DEFAULT_WEEK_START_DAY,
    require_employee_approval: bool = True,
    export_workers: int = DEFAULT_EXPORT_WORKERS,
    export_job_ttl_seconds: float = DEFAULT_EXPORT_JOB_TTL_SECONDS,
) -> Container:
    aggregator = TimesheetAggregator(entries_repo, directory, week_start_day=week_start_day)
    return Container(
        entries_repo=entries_repo,
        directory=directory,
        timeclock_service=TimeClockService(entries_repo, week_start_day=week_start_day),
        approval_workflow=ApprovalWorkflow(
            entries_repo,
            require_employee_approval=require_employee_approval,
            week_start_day=week_start_day,
        ),
        auto_timesheets=AutoTimesheetGenerator(entries_repo, week_start_day=week_start_day),
        aggregator=aggregator,
        export_service=TimesheetExportService(
            aggregator,
            max_workers=export_workers,
            jobs=ExportJobRegistry(ttl_seconds=export_job_ttl_seconds),
        ),
    )


def build_container(*, db_config: dict, settings=None) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    return build_services(
        MySQLTimeEntryRepository(conn),
        MySQLEmployeeDirectory(conn),
        week_start_day=int(getattr(settings, "WEEK_START_DAY", DEFAULT_WEEK_START_DAY)),
        require_employee_approval=bool(getattr(settings, "REQUIRE_EMPLOYEE_APPROVAL", True)),
        export_workers=int(getattr(settings, "EXPORT_WORKERS", DEFAULT_EXPORT_WORKERS)),
        export_job_ttl_seconds=float(getattr(settings, "EXPORT_JOB_TTL_SECONDS", DEFAULT_EXPORT_JOB_TTL_SECONDS)),
    )
