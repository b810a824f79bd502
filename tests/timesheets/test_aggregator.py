from datetime import date, datetime

import pytest

from timesheet_system.core.enums import TimeEntryStatus
from timesheet_system.core.exceptions import ExportCancelledError
from timesheet_system.timeclock.model import Break, TimeEntry
from timesheet_system.timesheets.aggregator import TimesheetAggregator
from timesheet_system.timesheets.model import TimesheetFilter


def _entry(employee_id, day, start=9, end=17, **kwargs):
    return TimeEntry(
        employee_id=employee_id,
        work_date=date(2026, 2, day),
        clock_in=datetime(2026, 2, day, start),
        clock_out=datetime(2026, 2, day, end),
        status=kwargs.pop("status", TimeEntryStatus.CLOCKED_OUT),
        **kwargs,
    )


def _filter(start=2, end=8, **kwargs):
    return TimesheetFilter(start_date=date(2026, 2, start), end_date=date(2026, 2, end), **kwargs)


@pytest.fixture
def aggregator(entries, directory):
    return TimesheetAggregator(entries, directory)


def test_rows_are_ordered_by_date_then_employee_name(entries, aggregator):
    entries.put(_entry("E002", 3))
    entries.put(_entry("E001", 3))
    entries.put(_entry("E002", 2))

    rows = aggregator.build_rows(_filter())

    assert [(r.work_date.day, r.employee_name) for r in rows] == [
        (2, "Bob Tran"),
        (3, "Alice Nguyen"),
        (3, "Bob Tran"),
    ]


def test_rows_are_enriched_from_the_directory(entries, aggregator):
    entries.put(_entry("E001", 2, status=TimeEntryStatus.APPROVED, approved_by="M001", manager_approval=True))

    (row,) = aggregator.build_rows(_filter())

    assert row.employee_name == "Alice Nguyen"
    assert row.department == "Operations"
    assert row.position == "Technician"
    assert row.approved_by_name == "Maria Lopez"


def test_unknown_employee_gets_placeholder(entries, aggregator):
    entries.put(_entry("X999", 2))

    (row,) = aggregator.build_rows(_filter())

    assert row.employee_name == "Unknown"
    assert row.department == "Unknown"
    assert row.employee_id == "X999"


def test_failing_directory_does_not_abort_the_export(entries):
    class BrokenDirectory:
        def get(self, employee_id):
            raise RuntimeError("directory unavailable")

    entries.put(_entry("E001", 2))
    (row,) = TimesheetAggregator(entries, BrokenDirectory()).build_rows(_filter())

    assert row.employee_name == "Unknown"


def test_filters(entries, aggregator):
    entries.put(_entry("E001", 2))
    entries.put(_entry("E002", 2, status=TimeEntryStatus.PENDING_APPROVAL))
    entries.put(_entry("E001", 10))

    assert [r.employee_id for r in aggregator.build_rows(_filter(department="Warehouse"))] == ["E002"]
    assert [r.employee_id for r in aggregator.build_rows(_filter(employee_id="E001"))] == ["E001"]
    assert [r.employee_id for r in aggregator.build_rows(_filter(status=TimeEntryStatus.PENDING_APPROVAL))] == ["E002"]


def test_totals_are_recomputed_and_week_total_spans_the_whole_week(entries, aggregator):
    entries.put(_entry("E001", 2))
    entries.put(
        _entry(
            "E001",
            4,
            9,
            13,
            breaks=(Break(start_time=datetime(2026, 2, 4, 10), end_time=datetime(2026, 2, 4, 10, 20), duration=20),),
            total_work_time=999,
        )
    )

    (row,) = aggregator.build_rows(_filter(4, 4))

    assert row.total_work_time == 220
    assert row.total_break_time == 20
    assert row.week_total == 480 + 220


def test_build_rows_can_be_cancelled(entries, aggregator):
    entries.put(_entry("E001", 2))
    with pytest.raises(ExportCancelledError):
        aggregator.build_rows(_filter(), should_cancel=lambda: True)


def test_empty_range_returns_no_rows(aggregator):
    assert aggregator.build_rows(_filter()) == []


def test_summarize(entries, aggregator):
    entries.put(_entry("E001", 2))
    entries.put(_entry("E001", 3, 9, 12))
    entries.put(_entry("E002", 3, status=TimeEntryStatus.APPROVED))

    summary = aggregator.summarize(aggregator.build_rows(_filter()))

    assert summary.entry_count == 3
    assert summary.total_work_minutes == 480 + 180 + 480
    assert summary.by_status == {"clocked_out": 2, "approved": 1}
    assert summary.by_employee[0]["employee_id"] == "E001"
    assert summary.by_employee[0]["entries"] == 2
