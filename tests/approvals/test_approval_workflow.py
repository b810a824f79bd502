from datetime import date, datetime

import pytest

from timesheet_system.approvals.service import ApprovalWorkflow
from timesheet_system.core.enums import Role, TimeEntryStatus
from timesheet_system.core.exceptions import AuthorizationError, InvalidStateError, NotFoundError
from timesheet_system.timeclock.service import TimeClockService
from timesheet_system.users.model import Actor

DAY = date(2026, 2, 2)


def _dt(h, m=0):
    return datetime(2026, 2, 2, h, m)


@pytest.fixture
def submitted(entries):
    clock = TimeClockService(entries)
    clock.clock_in("E001", now=_dt(9))
    clock.clock_out("E001", now=_dt(17))
    return clock.submit("E001", DAY)


@pytest.fixture
def workflow(entries):
    return ApprovalWorkflow(entries, clock=lambda: _dt(18))


def test_manager_then_employee_approval(workflow, submitted, employee, manager):
    after_manager = workflow.manager_approve(manager, employee_id="E001", work_date=DAY)
    assert after_manager.status == TimeEntryStatus.PENDING_APPROVAL

    final = workflow.employee_approve(employee, employee_id="E001", work_date=DAY, now=_dt(19))
    assert final.status == TimeEntryStatus.APPROVED
    assert final.approved_by == "M001"
    assert final.approval_date == _dt(19)


def test_employee_then_manager_approval(workflow, submitted, employee, manager):
    workflow.employee_approve(employee, employee_id="E001", work_date=DAY)
    final = workflow.manager_approve(manager, employee_id="E001", work_date=DAY)

    assert final.status == TimeEntryStatus.APPROVED
    assert final.approval_date == _dt(18)


def test_manager_only_policy(entries, submitted, manager):
    workflow = ApprovalWorkflow(entries, require_employee_approval=False, clock=lambda: _dt(18))

    assert workflow.manager_approve(manager, employee_id="E001", work_date=DAY).status == TimeEntryStatus.APPROVED


def test_rejection_then_reopen(workflow, submitted, manager, entries):
    rejected = workflow.reject(manager, employee_id="E001", work_date=DAY, note="  Break missing  ")
    assert rejected.status == TimeEntryStatus.REJECTED
    assert rejected.timesheet_notes == "Break missing"

    with pytest.raises(InvalidStateError):
        workflow.manager_approve(manager, employee_id="E001", work_date=DAY)

    reopened = workflow.reopen(manager, employee_id="E001", work_date=DAY)
    assert reopened.status == TimeEntryStatus.CLOCKED_OUT
    assert entries.get("E001", DAY).status == TimeEntryStatus.CLOCKED_OUT


def test_employees_cannot_act_as_managers(workflow, submitted, employee, entries):
    for action in (workflow.manager_approve, workflow.reopen):
        with pytest.raises(AuthorizationError):
            action(employee, employee_id="E001", work_date=DAY)
    with pytest.raises(AuthorizationError):
        workflow.reject(employee, employee_id="E001", work_date=DAY, note="no")

    assert entries.get("E001", DAY).status == TimeEntryStatus.PENDING_APPROVAL


def test_employee_cannot_approve_someone_else(workflow, submitted):
    other = Actor(employee_id="E002", role=Role.EMPLOYEE)
    with pytest.raises(AuthorizationError, match="your own"):
        workflow.employee_approve(other, employee_id="E001", work_date=DAY)


def test_admin_counts_as_manager(workflow, submitted):
    admin = Actor(employee_id="A001", role=Role.ADMIN)
    assert workflow.manager_approve(admin, employee_id="E001", work_date=DAY).approved_by == "A001"


def test_missing_entry(workflow, manager):
    with pytest.raises(NotFoundError):
        workflow.manager_approve(manager, employee_id="E001", work_date=DAY)


def test_approved_entry_cannot_be_rejected(workflow, submitted, employee, manager):
    workflow.manager_approve(manager, employee_id="E001", work_date=DAY)
    workflow.employee_approve(employee, employee_id="E001", work_date=DAY)

    with pytest.raises(InvalidStateError):
        workflow.reject(manager, employee_id="E001", work_date=DAY, note="late")


def test_approval_returns_whole_week_total(workflow, submitted, manager, entries):
    clock = TimeClockService(entries)
    clock.clock_in("E001", now=datetime(2026, 2, 3, 9))
    clock.clock_out("E001", now=datetime(2026, 2, 3, 13))

    approved = workflow.manager_approve(manager, employee_id="E001", work_date=DAY)

    assert approved.week_total == 480 + 240
    assert entries.get("E001", DAY).week_total == 720
