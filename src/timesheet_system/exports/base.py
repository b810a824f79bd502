from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from ..core.enums import ExportFormat
from ..core.exceptions import ExportCancelledError
from ..timesheets.model import TimesheetRow

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ExportPayload:
    content: bytes
    mime_type: str
    filename: str


def minimal_row(row: TimesheetRow) -> TimesheetRow:
    """Copy of ``row`` keeping only the core fields every format must show."""
    return replace(
        row,
        breaks=(),
        job_code=None,
        rate=None,
        shift=None,
        approved_by=None,
        approved_by_name=None,
        approval_date=None,
        timesheet_notes=None,
    )


class TimesheetRenderer(ABC):
    """Renderer interface: one implementation per export format."""

    format: ExportFormat
    mime_type: str
    extension: str

    @abstractmethod
    def render(self, rows: Sequence[TimesheetRow], *, should_cancel: Optional[Callable[[], bool]] = None) -> bytes:
        raise NotImplementedError

    def render_each(
        self,
        rows: Iterable[TimesheetRow],
        render_one: Callable[[TimesheetRow], T],
        *,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> list[T]:
        """Apply ``render_one`` per row; a failing row is retried with core fields only."""
        out: list[T] = []
        for row in rows:
            if should_cancel and should_cancel():
                raise ExportCancelledError("Export was cancelled")
            try:
                out.append(render_one(row))
            except Exception:
                logger.warning(
                    "Could not render %s timesheet %s/%s; using placeholders",
                    self.format.value,
                    row.employee_id,
                    row.work_date,
                    exc_info=True,
                )
                out.append(render_one(minimal_row(row)))
        return out
