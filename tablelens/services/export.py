from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from reportlab.platypus import Table as PdfTable
from reportlab.platypus import TableStyle

from ..errors import ExportError
from ..models.metrics import Metrics
from ..models.table import Row, stringify

"""CSV and PDF export of the current view.

CSV quoting is minimal: a text cell is wrapped in double quotes
only when it contains a comma, and nothing is escaped.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "PDF_ROW_LIMIT",
    "to_csv_text",
    "export_csv",
    "render_pdf",
    "export_pdf",
]

PDF_ROW_LIMIT = 10
PDF_TITLE = "Dashboard Report"


def _csv_cell(value) -> str:
    if isinstance(value, str) and "," in value:
        return f'"{value}"'
    return stringify(value)


def to_csv_text(headers: Sequence[str], rows: Sequence[Row]) -> str:
    lines = [",".join(str(h) for h in headers)]
    lines.extend(",".join(_csv_cell(c) for c in row) for row in rows)
    return "\n".join(lines)


def export_csv(path: Path, headers: Sequence[str], rows: Sequence[Row]) -> Path:
    if not rows:
        raise ExportError("No data to export")
    try:
        path.write_text(to_csv_text(headers, rows), encoding="utf-8")
    except OSError as e:
        raise ExportError(f"Error exporting CSV: {e}") from e
    logger.info(f"exported csv rows={len(rows)} path={path}")
    return path


def metric_lines(metrics: Metrics) -> list[str]:
    return [
        f"Revenue: ${metrics.revenue:.2f}",
        f"Users: {metrics.users}",
        f"Conversions: {metrics.conversions}",
        f"Growth: {metrics.growth:.2f}%",
    ]


def render_pdf(metrics: Metrics, headers: Sequence[str], rows: Sequence[Row]) -> bytes:
    """Render the report: title, four metrics, then up to 10 view rows."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    width, height = A4
    margin = 56

    c.setTitle(PDF_TITLE)
    c.setFont("Helvetica-Bold", 20)
    c.drawString(margin, height - margin, PDF_TITLE)

    c.setFont("Helvetica", 12)
    y = height - margin - 36
    for line in metric_lines(metrics):
        c.drawString(margin, y, line)
        y -= 18

    body = [[stringify(v) for v in r] for r in rows[:PDF_ROW_LIMIT]]
    if body:
        data = [[str(h) for h in headers], *body]
        table = PdfTable(data, repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#2563EB")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ]))
        _, table_height = table.wrapOn(c, width - 2 * margin, y)
        table.drawOn(c, margin, y - 18 - table_height)

    c.showPage()
    c.save()
    return buf.getvalue()


def export_pdf(path: Path, metrics: Metrics, headers: Sequence[str], rows: Sequence[Row]) -> Path:
    try:
        path.write_bytes(render_pdf(metrics, headers, rows))
    except OSError as e:
        raise ExportError(f"PDF export failed: {e}") from e
    logger.info(f"exported pdf rows={min(len(rows), PDF_ROW_LIMIT)} path={path}")
    return path
