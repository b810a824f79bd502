from __future__ import annotations

import io
import re
from typing import Callable, Optional, Sequence

import pandas as pd
from openpyxl.styles import Font, PatternFill

from ..core.constants import PLACEHOLDER
from ..core.enums import ExportFormat
from ..timesheets.model import TimesheetRow
from .base import TimesheetRenderer
from .sections import TABLE_COLUMNS, Section, build_sections, table_record

OVERVIEW_SHEET = "Timesheets"
_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")
_SECTION_FILL = PatternFill(fill_type="solid", fgColor="FFE0E0E0")


def _cell(value):
    return PLACEHOLDER if value is None or value == "" else value


def sheet_name_for(row: TimesheetRow, used: set[str]) -> str:
    base = _INVALID_SHEET_CHARS.sub("-", f"{row.work_date.isoformat()} {row.employee_id}")[:31]
    name, n = base, 2
    while name in used:
        suffix = f" ({n})"
        name = base[: 31 - len(suffix)] + suffix
        n += 1
    used.add(name)
    return name


class SpreadsheetTimesheetRenderer(TimesheetRenderer):
    """Excel workbook: an overview sheet plus one sheet per timesheet."""

    format = ExportFormat.SPREADSHEET
    mime_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    extension = "xlsx"

    @staticmethod
    def _write_timesheet(writer: pd.ExcelWriter, sheet_name: str, sections: list[Section]) -> None:
        cursor = 2  # 0-based; Excel row 1 holds the sheet title
        titles: list[tuple[int, str]] = []
        for section in sections:
            df = pd.DataFrame([(label, _cell(value)) for label, value in section.items], columns=["Field", "Value"])
            df.to_excel(writer, sheet_name=sheet_name, startrow=cursor + 1, index=False, header=False)
            titles.append((cursor + 1, section.title))
            cursor += len(section.items) + 2

        ws = writer.sheets[sheet_name]
        ws.cell(row=1, column=1, value="Employee Timesheet").font = Font(size=16, bold=True)
        for excel_row, title in titles:
            cell = ws.cell(row=excel_row, column=1, value=title)
            cell.font = Font(size=12, bold=True)
            cell.fill = _SECTION_FILL
        ws.column_dimensions["A"].width = 26
        ws.column_dimensions["B"].width = 34

    def render(self, rows: Sequence[TimesheetRow], *, should_cancel: Optional[Callable[[], bool]] = None) -> bytes:
        rendered = self.render_each(
            rows,
            lambda r: (r, table_record(r), build_sections(r)),
            should_cancel=should_cancel,
        )

        out = io.BytesIO()
        with pd.ExcelWriter(out, engine="openpyxl") as writer:
            overview = pd.DataFrame(
                [{col: _cell(record[col]) for col in TABLE_COLUMNS} for _, record, _ in rendered],
                columns=TABLE_COLUMNS,
            )
            overview.to_excel(writer, index=False, sheet_name=OVERVIEW_SHEET)

            used = {OVERVIEW_SHEET}
            for row, _, sections in rendered:
                self._write_timesheet(writer, sheet_name_for(row, used), sections)

        return out.getvalue()

    def render_single(self, row: TimesheetRow) -> bytes:
        """One-timesheet workbook (single sheet, no overview)."""
        (sections,) = self.render_each([row], build_sections)
        out = io.BytesIO()
        with pd.ExcelWriter(out, engine="openpyxl") as writer:
            self._write_timesheet(writer, "Timesheet", sections)
        return out.getvalue()
