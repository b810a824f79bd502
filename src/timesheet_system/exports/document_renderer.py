from __future__ import annotations

import io
from typing import Callable, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..core.enums import ExportFormat
from ..timesheets.model import TimesheetRow
from .base import TimesheetRenderer
from .sections import Section, build_sections, display

_TABLE_STYLE = TableStyle(
    [
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("LINEBELOW", (0, 0), (-1, -1), 0.25, colors.lightgrey),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
    ]
)


def _draw_page_number(canvas, doc) -> None:
    canvas.saveState()
    canvas.setFont("Helvetica", 9)
    canvas.drawCentredString(doc.pagesize[0] / 2, 0.5 * inch, f"Page {doc.page}")
    canvas.restoreState()


class DocumentTimesheetRenderer(TimesheetRenderer):
    """PDF: one timesheet per page, sections as key/value tables."""

    format = ExportFormat.DOCUMENT
    mime_type = "application/pdf"
    extension = "pdf"

    def __init__(self, *, page_compression: bool = True):
        self._page_compression = page_compression
        self._styles = getSampleStyleSheet()

    def _section_flowables(self, section: Section) -> list:
        body = self._styles["BodyText"]
        data = []
        for label, value in section.items:
            text = display(value)
            # long free text has to wrap; short values are drawn as plain strings
            data.append([label, Paragraph(escape(text), body) if len(text) > 60 else text])
        table = Table(data, colWidths=[2.2 * inch, 4.3 * inch], hAlign="LEFT")
        table.setStyle(_TABLE_STYLE)
        return [Paragraph(escape(section.title), self._styles["Heading2"]), table, Spacer(1, 0.15 * inch)]

    def _timesheet_flowables(self, row: TimesheetRow) -> list:
        story: list = [Paragraph("Employee Timesheet", self._styles["Title"])]
        for section in build_sections(row):
            story.extend(self._section_flowables(section))
        return story

    def _build(self, out: io.BytesIO, story: list) -> None:
        doc = SimpleDocTemplate(
            out,
            pagesize=letter,
            title="Timesheets",
            invariant=1,
            pageCompression=1 if self._page_compression else 0,
        )
        doc.build(story, onFirstPage=_draw_page_number, onLaterPages=_draw_page_number)

    def _laid_out_flowables(self, row: TimesheetRow) -> list:
        """Flowables for ``row`` after a trial layout on a scratch document.

        Layout errors only surface in ``build``, so they are raised here, inside
        the per-row fallback. Flowables are single-use, hence the rebuild.
        """
        self._build(io.BytesIO(), self._timesheet_flowables(row))
        return self._timesheet_flowables(row)

    def render(self, rows: Sequence[TimesheetRow], *, should_cancel: Optional[Callable[[], bool]] = None) -> bytes:
        pages = self.render_each(rows, self._laid_out_flowables, should_cancel=should_cancel)

        story: list = []
        for i, page in enumerate(pages):
            if i:
                story.append(PageBreak())
            story.extend(page)
        if not story:
            story.append(Paragraph("No timesheets found for the selected range.", self._styles["BodyText"]))

        out = io.BytesIO()
        self._build(out, story)
        return out.getvalue()
