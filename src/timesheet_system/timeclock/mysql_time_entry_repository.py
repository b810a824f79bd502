from __future__ import annotations

import json
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

import mysql.connector

from ..core.enums import TimeEntryStatus
from ..core.exceptions import DuplicateClockInError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Break, TimeEntry
from .repository import TimeEntryRepository

_COLUMNS = """
    employee_id, work_date, clock_in, clock_out, breaks_json,
    total_work_time, total_break_time, week_total,
    job_code, rate, shift, status,
    employee_approval, manager_approval, approved_by, approval_date, timesheet_notes,
    version
"""


def breaks_to_json(breaks: Sequence[Break]) -> str:
    return json.dumps(
        [
            {
                "start_time": b.start_time.isoformat(),
                "end_time": b.end_time.isoformat() if b.end_time else None,
                "duration": b.duration,
            }
            for b in breaks
        ]
    )


def breaks_from_json(raw: Any) -> tuple[Break, ...]:
    if not raw:
        return ()
    items = json.loads(raw) if isinstance(raw, (str, bytes, bytearray)) else raw
    return tuple(
        Break(
            start_time=datetime.fromisoformat(item["start_time"]),
            end_time=datetime.fromisoformat(item["end_time"]) if item.get("end_time") else None,
            duration=item.get("duration"),
        )
        for item in items
    )


def _row_to_entry(r: dict) -> TimeEntry:
    rate = r.get("rate")
    return TimeEntry(
        employee_id=str(r["employee_id"]),
        work_date=r["work_date"],
        clock_in=r.get("clock_in"),
        clock_out=r.get("clock_out"),
        breaks=breaks_from_json(r.get("breaks_json")),
        total_work_time=int(r.get("total_work_time") or 0),
        total_break_time=int(r.get("total_break_time") or 0),
        week_total=int(r.get("week_total") or 0),
        job_code=r.get("job_code"),
        rate=Decimal(str(rate)) if rate is not None else None,
        shift=r.get("shift"),
        status=TimeEntryStatus(r["status"]),
        employee_approval=bool(r.get("employee_approval")),
        manager_approval=bool(r.get("manager_approval")),
        approved_by=r.get("approved_by"),
        approval_date=r.get("approval_date"),
        timesheet_notes=r.get("timesheet_notes"),
        version=int(r.get("version") or 0),
    )


def _values(entry: TimeEntry) -> tuple:
    return (
        entry.clock_in,
        entry.clock_out,
        breaks_to_json(entry.breaks),
        entry.total_work_time,
        entry.total_break_time,
        entry.week_total,
        entry.job_code,
        entry.rate,
        entry.shift,
        entry.status.value,
        int(entry.employee_approval),
        int(entry.manager_approval),
        entry.approved_by,
        entry.approval_date,
        entry.timesheet_notes,
    )


class MySQLTimeEntryRepository(TimeEntryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, employee_id: str, work_date: date) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM time_entries WHERE employee_id=%s AND work_date=%s",
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def find_open(self, employee_id: str) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM time_entries
                WHERE employee_id=%s AND status=%s
                ORDER BY work_date DESC
                LIMIT 1
                """,
                (employee_id, TimeEntryStatus.OPEN.value),
            )
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def create(self, entry: TimeEntry) -> TimeEntry:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO time_entries({_COLUMNS})
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (entry.employee_id, entry.work_date) + _values(entry) + (1,),
                )
        except mysql.connector.IntegrityError:
            raise DuplicateClockInError(f"A time entry already exists for {entry.work_date.isoformat()}")
        return replace(entry, version=1)

    def save(self, entry: TimeEntry, *, expected_version: int, expected_status: TimeEntryStatus) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET clock_in=%s, clock_out=%s, breaks_json=%s,
                    total_work_time=%s, total_break_time=%s, week_total=%s,
                    job_code=%s, rate=%s, shift=%s, status=%s,
                    employee_approval=%s, manager_approval=%s, approved_by=%s, approval_date=%s,
                    timesheet_notes=%s,
                    version=version + 1
                WHERE employee_id=%s AND work_date=%s AND version=%s AND status=%s
                """,
                _values(entry) + (entry.employee_id, entry.work_date, int(expected_version), expected_status.value),
            )
            if cur.rowcount == 0:
                return None
        return replace(entry, version=int(expected_version) + 1)

    def list_entries(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[str] = None,
        status: Optional[TimeEntryStatus] = None,
    ) -> Sequence[TimeEntry]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(str(employee_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM time_entries WHERE {where} ORDER BY work_date ASC, employee_id ASC",
                tuple(params),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]
