from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date
from typing import Optional

import pytest

from timesheet_system.core.enums import Role, TimeEntryStatus
from timesheet_system.core.exceptions import DuplicateClockInError
from timesheet_system.timeclock.model import TimeEntry
from timesheet_system.users.model import Actor, Employee

class InMemoryTimeEntries:
    def __init__(self):
        self._by_key: dict[tuple[str, date], TimeEntry] = {}
        self._lock = threading.Lock()

    def get(self, employee_id: str, work_date: date) -> Optional[TimeEntry]:
        return self._by_key.get((employee_id, work_date))

    def find_open(self, employee_id: str) -> Optional[TimeEntry]:
        items = [
            e for (emp, _), e in self._by_key.items() if emp == employee_id and e.status == TimeEntryStatus.OPEN
        ]
        items.sort(key=lambda e: e.work_date, reverse=True)
        return items[0] if items else None

    def create(self, entry: TimeEntry) -> TimeEntry:
        with self._lock:
            key = (entry.employee_id, entry.work_date)
            if key in self._by_key:
                raise DuplicateClockInError("A time entry already exists")
            stored = replace(entry, version=1)
            self._by_key[key] = stored
            return stored

    def save(self, entry: TimeEntry, *, expected_version: int, expected_status: TimeEntryStatus) -> Optional[TimeEntry]:
        with self._lock:
            key = (entry.employee_id, entry.work_date)
            current = self._by_key.get(key)
            if current is None or current.version != expected_version or current.status != expected_status:
                return None
            stored = replace(entry, version=expected_version + 1)
            self._by_key[key] = stored
            return stored

    def list_entries(self, *, start_date: date, end_date: date, employee_id=None, status=None):
        items = [
            e
            for e in self._by_key.values()
            if start_date <= e.work_date <= end_date
            and (employee_id is None or e.employee_id == employee_id)
            and (status is None or e.status == status)
        ]
        items.sort(key=lambda e: (e.work_date, e.employee_id))
        return items

    def put(self, entry: TimeEntry) -> TimeEntry:
        """Test helper: store an entry as-is."""
        stored = entry if entry.version else replace(entry, version=1)
        self._by_key[(entry.employee_id, entry.work_date)] = stored
        return stored


class InMemoryDirectory:
    def __init__(self, employees: list[Employee]):
        self._by_id = {e.employee_id: e for e in employees}

    def get(self, employee_id: str) -> Optional[Employee]:
        return self._by_id.get(employee_id)


@pytest.fixture
def entries() -> InMemoryTimeEntries:
    return InMemoryTimeEntries()


@pytest.fixture
def directory() -> InMemoryDirectory:
    return InMemoryDirectory(
        [
            Employee(employee_id="E001", name="Alice Nguyen", department="Operations", position="Technician"),
            Employee(employee_id="E002", name="Bob Tran", department="Warehouse", position="Picker"),
            Employee(employee_id="M001", name="Maria Lopez", department="Operations", position="Supervisor"),
        ]
    )


@pytest.fixture
def employee() -> Actor:
    return Actor(employee_id="E001", role=Role.EMPLOYEE)


@pytest.fixture
def manager() -> Actor:
    return Actor(employee_id="M001", role=Role.MANAGER)

