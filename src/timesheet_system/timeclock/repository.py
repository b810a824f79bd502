from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import TimeEntryStatus
from .model import TimeEntry


class TimeEntryRepository(Protocol):
    """Persistence contract for time entries, keyed by (employee_id, work_date).

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get(self, employee_id: str, work_date: date) -> Optional[TimeEntry]:
        raise NotImplementedError

    def find_open(self, employee_id: str) -> Optional[TimeEntry]:
        """Most recent entry still in ``open`` status, whatever its date."""

        raise NotImplementedError

    def create(self, entry: TimeEntry) -> TimeEntry:
        """Insert a new entry; raises DuplicateClockInError if the key exists."""

        raise NotImplementedError

    def save(self, entry: TimeEntry, *, expected_version: int, expected_status: TimeEntryStatus) -> Optional[TimeEntry]:
        """Compare-and-swap write.

        Returns the stored entry (version bumped) or None when the stored row no
        longer matches ``expected_version``/``expected_status``.
        """

        raise NotImplementedError

    def list_entries(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[str] = None,
        status: Optional[TimeEntryStatus] = None,
    ) -> Sequence[TimeEntry]:
        raise NotImplementedError
