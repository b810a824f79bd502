from __future__ import annotations

import csv
import io
from typing import Callable, Optional, Sequence

from ..core.enums import ExportFormat
from ..timesheets.model import TimesheetRow
from .base import TimesheetRenderer
from .sections import TABLE_COLUMNS, display, table_record


def sanitize_notes(value: Optional[str]) -> Optional[str]:
    """Lossy: commas become ';' and line breaks become spaces."""
    if value is None:
        return None
    return value.replace(",", ";").replace("\r\n", " ").replace("\n", " ").replace("\r", " ")


class CSVTimesheetRenderer(TimesheetRenderer):
    format = ExportFormat.CSV
    mime_type = "text/csv"
    extension = "csv"

    @staticmethod
    def _line(row: TimesheetRow) -> list[str]:
        record = table_record(row)
        record["Notes"] = sanitize_notes(record["Notes"])
        return [display(record[col]) for col in TABLE_COLUMNS]

    def render(self, rows: Sequence[TimesheetRow], *, should_cancel: Optional[Callable[[], bool]] = None) -> bytes:
        lines = self.render_each(rows, self._line, should_cancel=should_cancel)

        out = io.StringIO()
        writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(TABLE_COLUMNS)
        writer.writerows(lines)

        # UTF-8 with BOM so Excel opens non-ASCII names correctly
        return out.getvalue().encode("utf-8-sig")
