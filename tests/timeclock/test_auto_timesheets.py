from datetime import date, time
from decimal import Decimal

from timesheet_system.core.enums import TimeEntryStatus
from timesheet_system.timeclock.auto_timesheets import AutoTimesheetGenerator
from timesheet_system.timeclock.model import ScheduledWork, TimeEntry


def _work(day, employee_id="E001", start=time(9), end=time(17), **kwargs):
    return ScheduledWork(employee_id=employee_id, work_date=date(2026, 2, day), start_time=start, end_time=end, **kwargs)


def test_generates_completed_entries_from_elapsed_schedule(entries):
    generator = AutoTimesheetGenerator(entries)

    result = generator.generate(
        [_work(2, job_code="JOB9", rate=Decimal("18.00"), notes="Front desk"), _work(3, employee_id="E002")],
        today=date(2026, 2, 3),
    )

    assert len(result.generated) == 2
    assert result.skipped == [] and result.errors == []

    first = entries.get("E001", date(2026, 2, 2))
    assert first.status == TimeEntryStatus.COMPLETED
    assert first.total_work_time == 480
    assert first.job_code == "JOB9"
    assert first.rate == Decimal("18.00")
    assert first.timesheet_notes == "Auto-generated from scheduled work: Front desk"

    second = entries.get("E002", date(2026, 2, 3))
    assert second.job_code == "ACT001"
    assert second.timesheet_notes == "Auto-generated from scheduled work: No notes"


def test_skips_future_and_existing_entries(entries):
    entries.put(TimeEntry(employee_id="E001", work_date=date(2026, 2, 2), status=TimeEntryStatus.CLOCKED_OUT))
    generator = AutoTimesheetGenerator(entries)

    result = generator.generate([_work(2), _work(9)], today=date(2026, 2, 3))

    assert result.generated == []
    assert [s["reason"] for s in result.skipped] == ["Timesheet already exists", "Scheduled work has not happened yet"]
    assert entries.get("E001", date(2026, 2, 2)).status == TimeEntryStatus.CLOCKED_OUT


def test_invalid_schedule_is_reported_not_raised(entries):
    generator = AutoTimesheetGenerator(entries)

    result = generator.generate([_work(2, start=time(17), end=time(9)), _work(3)], today=date(2026, 2, 3))

    assert len(result.generated) == 1
    assert result.errors[0]["work_date"] == "2026-02-02"
    assert "after start time" in result.errors[0]["error"]


def test_generated_entries_carry_week_totals(entries):
    generator = AutoTimesheetGenerator(entries)

    result = generator.generate([_work(2), _work(3, end=time(13))], today=date(2026, 2, 3))

    assert [e.week_total for e in result.generated] == [720, 720]
    assert entries.get("E001", date(2026, 2, 2)).week_total == 480
    assert entries.get("E001", date(2026, 2, 3)).week_total == 720


def test_single_generated_entry_counts_its_own_minutes(entries):
    (entry,) = AutoTimesheetGenerator(entries).generate([_work(2)], today=date(2026, 2, 3)).generated

    assert entry.total_work_time == 480
    assert entry.week_total == 480
    assert entries.get("E001", date(2026, 2, 2)).week_total == 480
