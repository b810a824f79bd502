from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee


class EmployeeDirectory(Protocol):
    """Resolves employee references; returns None when the employee is unknown."""

    def get(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError
