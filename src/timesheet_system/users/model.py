from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Employee directory record used to enrich timesheet rows."""

    employee_id: str
    name: str
    department: Optional[str] = None
    position: Optional[str] = None


@dataclass(frozen=True)
class Actor:
    """Authenticated caller as supplied by the identity provider."""

    employee_id: str
    role: Role

    @property
    def is_manager(self) -> bool:
        return self.role in {Role.MANAGER, Role.ADMIN}
