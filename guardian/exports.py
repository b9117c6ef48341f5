"""
Export helpers for LGPD Guardian.

Builds the PDF and Excel files offered by the ROPA, incident and document
pages. PDFs are produced with reportlab, spreadsheets with openpyxl.
"""
from __future__ import annotations

import io
import re
from datetime import datetime
from typing import Any, List, Optional, Sequence

import pandas as pd

# PDF generation
from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.pdfgen import canvas as pdf_canvas
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

# Excel generation
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils.dataframe import dataframe_to_rows

ROPA_HEADER_COLOR = "#10b981"
INCIDENT_HEADER_COLOR = "#dc2626"
AUDIT_HEADER_COLOR = "#4b5563"

_EMPHASIS_RE = re.compile(r"(\*\*|\*)")
_EMPHASIS_TAGS = {"**": "b", "*": "i"}


class NumberedCanvas(pdf_canvas.Canvas):
    """Canvas that stamps "Page i of n" on every page once the total is known."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states: List[dict] = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_page_number(total)
            super().showPage()
        super().save()

    def _draw_page_number(self, total: int) -> None:
        width, _ = self._pagesize
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.HexColor("#969696"))
        self.drawRightString(width - 54, 28, f"Page {self._pageNumber} of {total}")


class ReportBuilder:
    """Shared paragraph styles and document scaffolding for all exports."""

    def __init__(self):
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        """Set up custom styles for PDF generation."""
        self.styles.add(ParagraphStyle(
            name="ReportTitle",
            parent=self.styles["Heading1"],
            alignment=TA_LEFT,
            fontSize=18,
            spaceAfter=8,
            textColor=colors.HexColor("#1e293b"),
        ))
        self.styles.add(ParagraphStyle(
            name="ReportSubtitle",
            parent=self.styles["Normal"],
            fontSize=10,
            leading=13,
            textColor=colors.HexColor("#646464"),
        ))
        self.styles.add(ParagraphStyle(
            name="ReportHeading",
            parent=self.styles["Heading2"],
            fontSize=13,
            spaceBefore=10,
            spaceAfter=4,
            textColor=colors.HexColor("#334155"),
        ))
        self.styles.add(ParagraphStyle(
            name="ReportSubheading",
            parent=self.styles["Heading3"],
            fontSize=11,
            spaceBefore=8,
            spaceAfter=3,
        ))
        self.styles.add(ParagraphStyle(
            name="ReportBody",
            parent=self.styles["Normal"],
            fontSize=11,
            leading=15,
            spaceAfter=4,
        ))
        self.styles.add(ParagraphStyle(
            name="ReportBullet",
            parent=self.styles["Normal"],
            fontSize=11,
            leading=15,
            leftIndent=14,
            bulletIndent=4,
        ))
        self.styles.add(ParagraphStyle(
            name="TableCell",
            parent=self.styles["Normal"],
            fontSize=8,
            leading=10,
        ))
        self.styles.add(ParagraphStyle(
            name="TableHeader",
            parent=self.styles["Normal"],
            fontName="Helvetica-Bold",
            fontSize=8,
            leading=10,
            textColor=colors.whitesmoke,
        ))

    def _document(self, buffer: io.BytesIO, wide: bool = False) -> SimpleDocTemplate:
        return SimpleDocTemplate(
            buffer,
            pagesize=landscape(A4) if wide else A4,
            rightMargin=40, leftMargin=40,
            topMargin=48, bottomMargin=48,
        )

    def table_pdf(
        self,
        title: str,
        subtitle_lines: Sequence[str],
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        header_color: str,
        col_widths: Optional[Sequence[float]] = None,
        wide: bool = False,
    ) -> bytes:
        """Render a titled report containing a single data table."""
        buffer = io.BytesIO()
        doc = self._document(buffer, wide=wide)

        story: List[Any] = [Paragraph(escape_text(title), self.styles["ReportTitle"])]
        for line in subtitle_lines:
            story.append(Paragraph(escape_text(line), self.styles["ReportSubtitle"]))
        story.append(Spacer(1, 14))

        cell = self.styles["TableCell"]
        header = self.styles["TableHeader"]
        table_data = [[Paragraph(escape_text(c), header) for c in columns]]
        for row in rows:
            table_data.append([Paragraph(escape_text("" if v is None else str(v)), cell) for v in row])

        if col_widths is None:
            col_widths = [doc.width / len(columns)] * len(columns)
        table = Table(table_data, colWidths=list(col_widths), repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(header_color)),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("ALIGN", (0, 0), (-1, -1), "LEFT"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f9fafb")]),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#d1d5db")),
            ("TOPPADDING", (0, 0), (-1, -1), 3),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ]))
        story.append(table)
        if not rows:
            story.append(Spacer(1, 8))
            story.append(Paragraph("No records.", self.styles["ReportSubtitle"]))

        doc.build(story, canvasmaker=NumberedCanvas)
        buffer.seek(0)
        return buffer.getvalue()

    def markdown_pdf(self, title: str, header_lines: Sequence[str], markdown_text: str) -> bytes:
        """Render a Markdown document (headings, bullets, bold) as a paginated PDF."""
        buffer = io.BytesIO()
        doc = self._document(buffer)

        story: List[Any] = [Paragraph(escape_text(title.upper()), self.styles["ReportTitle"])]
        for line in header_lines:
            story.append(Paragraph(escape_text(line), self.styles["ReportSubtitle"]))
        story.append(Spacer(1, 6))
        story.append(HRFlowable(width="100%", thickness=0.7, color=colors.HexColor("#c8c8c8")))
        story.append(Spacer(1, 10))
        story.extend(self.markdown_flowables(markdown_text))

        doc.build(story, canvasmaker=NumberedCanvas)
        buffer.seek(0)
        return buffer.getvalue()

    def markdown_flowables(self, markdown_text: str) -> List[Any]:
        flowables: List[Any] = []
        for raw in (markdown_text or "").splitlines():
            line = raw.strip()
            if not line:
                flowables.append(Spacer(1, 6))
            elif line.startswith("### "):
                flowables.append(Paragraph(inline_markup(line[4:]), self.styles["ReportSubheading"]))
            elif line.startswith("## "):
                flowables.append(Paragraph(inline_markup(line[3:]), self.styles["ReportHeading"]))
            elif line.startswith("# "):
                flowables.append(Paragraph(inline_markup(line[2:]), self.styles["ReportHeading"]))
            elif line.startswith(("- ", "* ")):
                flowables.append(Paragraph(inline_markup(line[2:]), self.styles["ReportBullet"], bulletText="•"))
            elif line in ("---", "***"):
                flowables.append(HRFlowable(width="100%", thickness=0.5, color=colors.HexColor("#c8c8c8")))
            else:
                flowables.append(Paragraph(inline_markup(line), self.styles["ReportBody"]))
        return flowables


def escape_text(text: str) -> str:
    """Escape characters reportlab's paragraph parser treats as markup."""
    return (text or "").replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def inline_markup(text: str) -> str:
    """Translate Markdown bold/italic into balanced reportlab inline tags.

    Overlapping markers such as ``**a *b** c*`` are re-nested; markers left
    without a partner are kept as literal asterisks.
    """
    out: List[str] = []
    open_tags: List[tuple] = []  # (tag, position of its opening piece in ``out``)
    for piece in _EMPHASIS_RE.split(escape_text(text)):
        tag = _EMPHASIS_TAGS.get(piece)
        if tag is None:
            out.append(piece)
            continue
        if any(t == tag for t, _ in open_tags):
            # close the tags opened inside this one, then reopen them after it
            reopen = []
            while open_tags[-1][0] != tag:
                inner, _ = open_tags.pop()
                out.append(f"</{inner}>")
                reopen.append(inner)
            open_tags.pop()
            out.append(f"</{tag}>")
            for inner in reversed(reopen):
                open_tags.append((inner, len(out)))
                out.append(f"<{inner}>")
        else:
            open_tags.append((tag, len(out)))
            out.append(f"<{tag}>")
    for tag, position in open_tags:
        out[position] = "**" if tag == "b" else "*"
    return "".join(out)


def generated_on() -> str:
    now = datetime.now()
    return f"Generated on: {now.strftime('%d/%m/%Y')} at {now.strftime('%H:%M:%S')}"


def build_table_pdf(
    title: str,
    subtitle_lines: Sequence[str],
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
    header_color: str,
    col_widths: Optional[Sequence[float]] = None,
    wide: bool = False,
) -> bytes:
    """Export a single-table report as PDF."""
    return ReportBuilder().table_pdf(title, subtitle_lines, columns, rows, header_color, col_widths, wide)


def build_markdown_pdf(title: str, header_lines: Sequence[str], markdown_text: str) -> bytes:
    """Export a Markdown document as PDF."""
    return ReportBuilder().markdown_pdf(title, header_lines, markdown_text)


def dataframe_to_excel(df: pd.DataFrame, sheet_title: str, header_color: str = "2C3E50") -> bytes:
    """Write a DataFrame to a single-sheet workbook with a styled header row."""
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title[:31]
    for row in dataframe_to_rows(df, index=False, header=True):
        ws.append(row)

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color=header_color.lstrip("#"), end_color=header_color.lstrip("#"), fill_type="solid")
    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center", vertical="center")

    for column_cells in ws.columns:
        longest = max((len(str(c.value)) for c in column_cells if c.value is not None), default=10)
        ws.column_dimensions[column_cells[0].column_letter].width = min(60, max(12, longest + 2))

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf.getvalue()

