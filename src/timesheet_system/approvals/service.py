from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_WEEK_START_DAY
from ..core.exceptions import AuthorizationError, NotFoundError
from ..timeclock import state_machine
from ..timeclock.model import TimeEntry
from ..timeclock.repository import TimeEntryRepository
from ..timeclock.service import save_transition, with_week_totals
from ..users.model import Actor

logger = logging.getLogger(__name__)


class ApprovalWorkflow:
    """Role policy around the approval transitions.

    Managers and admins may manager-approve, reject and reopen any entry;
    employees may only sign off their own entries.
    """

    def __init__(
        self,
        entries: TimeEntryRepository,
        *,
        require_employee_approval: bool = True,
        week_start_day: int = DEFAULT_WEEK_START_DAY,
        clock: Callable[[], datetime] = now_local,
    ):
        self._entries = entries
        self._week_start_day = int(week_start_day)
        self._require_employee_approval = bool(require_employee_approval)
        self._clock = clock

    def _load(self, employee_id: str, work_date: date) -> TimeEntry:
        entry = self._entries.get(employee_id, work_date)
        if entry is None:
            raise NotFoundError(f"No time entry for {employee_id} on {work_date.isoformat()}")
        return with_week_totals(self._entries, [entry], week_start_day=self._week_start_day)[0]

    @staticmethod
    def _require_manager(actor: Actor) -> None:
        if not actor.is_manager:
            raise AuthorizationError("Only managers can approve or reject timesheets")

    def employee_approve(self, actor: Actor, *, employee_id: str, work_date: date, now: Optional[datetime] = None) -> TimeEntry:
        if actor.employee_id != employee_id:
            raise AuthorizationError("You can only approve your own timesheet")
        entry = self._load(employee_id, work_date)
        updated = state_machine.employee_approve(
            entry,
            now=now or self._clock(),
            require_employee_approval=self._require_employee_approval,
        )
        saved = save_transition(self._entries, entry, updated)
        logger.info("Employee %s approved timesheet %s (status=%s)", actor.employee_id, work_date, saved.status.value)
        return saved

    def manager_approve(self, actor: Actor, *, employee_id: str, work_date: date, now: Optional[datetime] = None) -> TimeEntry:
        self._require_manager(actor)
        entry = self._load(employee_id, work_date)
        updated = state_machine.manager_approve(
            entry,
            approver_id=actor.employee_id,
            now=now or self._clock(),
            require_employee_approval=self._require_employee_approval,
        )
        saved = save_transition(self._entries, entry, updated)
        logger.info(
            "Manager %s approved timesheet %s/%s (status=%s)",
            actor.employee_id,
            employee_id,
            work_date,
            saved.status.value,
        )
        return saved

    def reject(self, actor: Actor, *, employee_id: str, work_date: date, note: str = "") -> TimeEntry:
        self._require_manager(actor)
        entry = self._load(employee_id, work_date)
        updated = state_machine.reject(entry, approver_id=actor.employee_id, note=(note or "").strip() or None)
        saved = save_transition(self._entries, entry, updated)
        logger.info("Manager %s rejected timesheet %s/%s", actor.employee_id, employee_id, work_date)
        return saved

    def reopen(self, actor: Actor, *, employee_id: str, work_date: date) -> TimeEntry:
        self._require_manager(actor)
        entry = self._load(employee_id, work_date)
        saved = save_transition(self._entries, entry, state_machine.reopen(entry))
        logger.info("Manager %s reopened timesheet %s/%s", actor.employee_id, employee_id, work_date)
        return saved
