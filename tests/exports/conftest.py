from datetime import date, datetime
from decimal import Decimal

import pytest

from timesheet_system.core.enums import TimeEntryStatus
from timesheet_system.timeclock.model import Break
from timesheet_system.timesheets.model import TimesheetRow


def make_row(**overrides) -> TimesheetRow:
    values = dict(
        work_date=date(2026, 2, 2),
        employee_id="E001",
        employee_name="Alice Nguyen",
        department="Operations",
        position="Technician",
        clock_in=datetime(2026, 2, 2, 9),
        clock_out=datetime(2026, 2, 2, 17),
        breaks=(Break(start_time=datetime(2026, 2, 2, 12), end_time=datetime(2026, 2, 2, 12, 30), duration=30),),
        total_work_time=450,
        total_break_time=30,
        week_total=450,
        job_code="JOB7",
        rate=Decimal("21.50"),
        shift="Day",
        status=TimeEntryStatus.APPROVED,
        employee_approval=True,
        manager_approval=True,
        approved_by="M001",
        approved_by_name="Maria Lopez",
        approval_date=datetime(2026, 2, 3, 8, 15),
        timesheet_notes="Covered inventory, then stayed late",
    )
    values.update(overrides)
    return TimesheetRow(**values)


@pytest.fixture
def row() -> TimesheetRow:
    return make_row()


@pytest.fixture
def bare_row() -> TimesheetRow:
    return make_row(
        employee_id="E002",
        employee_name="Bob Tran",
        department="Warehouse",
        position="Picker",
        breaks=(),
        total_work_time=480,
        total_break_time=0,
        week_total=480,
        job_code=None,
        rate=None,
        shift=None,
        status=TimeEntryStatus.CLOCKED_OUT,
        employee_approval=False,
        manager_approval=False,
        approved_by=None,
        approved_by_name=None,
        approval_date=None,
        timesheet_notes=None,
    )
