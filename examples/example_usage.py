"""Example: use the service layer directly (no Flask).

Prints an employee's time summary and writes this week's timesheets to CSV.
"""

import importlib
import sys
from datetime import date

from dotenv import load_dotenv

from timesheet_system.config import get_settings_module
from timesheet_system.container import build_container
from timesheet_system.core.enums import ExportFormat
from timesheet_system.timeclock.calculator import week_bounds
from timesheet_system.timesheets.model import ExportRequest, TimesheetFilter


def main(employee_id: str = "E001"):
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    print(container.timeclock_service.get_summary(employee_id))

    start, end = week_bounds(date.today(), settings.WEEK_START_DAY)
    request = ExportRequest(format=ExportFormat.CSV, filter=TimesheetFilter(start_date=start, end_date=end))
    payload = container.export_service.export(request)
    with open(payload.filename, "wb") as f:
        f.write(payload.content)
    print(f"Wrote {payload.filename} ({len(payload.content)} bytes)")


if __name__ == "__main__":
    main(*sys.argv[1:2])
