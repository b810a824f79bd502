from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .directory import EmployeeDirectory
from .model import Employee


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT e.employee_id, e.full_name, e.position, d.dept_name
                FROM employees e
                LEFT JOIN departments d ON d.dept_id = e.dept_id
                WHERE e.employee_id=%s AND e.is_active=1
                """,
                (employee_id,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Employee(
                employee_id=str(row["employee_id"]),
                name=row["full_name"],
                department=row.get("dept_name"),
                position=row.get("position"),
            )
