from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.enums import ExportFormat
from ..core.exceptions import ExportError
from .base import TimesheetRenderer
from .csv_renderer import CSVTimesheetRenderer
from .document_renderer import DocumentTimesheetRenderer
from .spreadsheet_renderer import SpreadsheetTimesheetRenderer


def _default_renderers() -> dict[ExportFormat, TimesheetRenderer]:
    return {
        ExportFormat.CSV: CSVTimesheetRenderer(),
        ExportFormat.SPREADSHEET: SpreadsheetTimesheetRenderer(),
        ExportFormat.DOCUMENT: DocumentTimesheetRenderer(),
    }


@dataclass
class RendererFactory:
    """Factory Pattern: pick the renderer for a requested export format."""

    renderers: dict[ExportFormat, TimesheetRenderer] = field(default_factory=_default_renderers)

    def for_format(self, fmt: ExportFormat | str) -> TimesheetRenderer:
        try:
            key: Optional[ExportFormat] = ExportFormat(fmt)
        except ValueError:
            key = None
        renderer = self.renderers.get(key) if key else None
        if renderer is None:
            raise ExportError(f"Unsupported export format: {fmt!r}")
        return renderer
