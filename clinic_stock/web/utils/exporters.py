"""CSV/XLSX/HTML export utilities."""

from __future__ import annotations

import csv
import io
import re
from datetime import datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font

from clinic_stock.db.models import utcnow

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def humanize(column: str) -> str:
    """Turn a column key into a heading: lowStockThreshold -> Low Stock Threshold."""
    words = _CAMEL_BOUNDARY.sub(" ", column).replace("_", " ").split()
    return " ".join(w[:1].upper() + w[1:] for w in words)


def display(value: Any) -> Any:
    """Render None/empty cells as '-'."""
    if value is None or value == "":
        return "-"
    return value


_html_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
)
_html_env.filters["humanize"] = humanize
_html_env.filters["display"] = display


def to_csv(data: list[dict[str, Any]], columns: list[str]) -> str:
    """Convert data to CSV string.

    Args:
        data: List of dictionaries to export
        columns: Column names to include (in order)

    Returns:
        CSV string

    """
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=columns, extrasaction="ignore")
    writer.writeheader()
    writer.writerows(data)
    return output.getvalue()


def to_xlsx(data: list[dict[str, Any]], columns: list[str], sheet_name: str = "Data") -> bytes:
    """Convert data to XLSX bytes.

    Args:
        data: List of dictionaries to export
        columns: Column names to include (in order)
        sheet_name: Name for the Excel sheet

    Returns:
        XLSX file as bytes

    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name[:31]  # Excel sheet title limit

    # Header row with bold font
    header_font = Font(bold=True)
    for col_idx, col_name in enumerate(columns, start=1):
        cell = ws.cell(row=1, column=col_idx, value=humanize(col_name))
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center")

    for row_idx, row_data in enumerate(data, start=2):
        for col_idx, col_name in enumerate(columns, start=1):
            ws.cell(row=row_idx, column=col_idx, value=row_data.get(col_name))

    # Auto-adjust column widths
    for column_cells in ws.columns:
        max_length = 0
        column_letter = column_cells[0].column_letter
        for cell in column_cells:
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))
        ws.column_dimensions[column_letter].width = min(max_length + 2, 50)

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output.getvalue()


def to_html(
    title: str,
    data: list[dict[str, Any]],
    columns: list[str],
    footer: str = "",
    generated_at: datetime | None = None,
) -> str:
    """Render data as a printable HTML report.

    Args:
        title: Report heading
        data: List of dictionaries to export
        columns: Column names to include (in order)
        footer: Footer line
        generated_at: Generation timestamp (default: now, UTC)

    Returns:
        HTML document string

    """
    template = _html_env.get_template("report.html")
    return template.render(
        title=title,
        rows=data,
        columns=columns,
        footer=footer,
        generated_at=(generated_at or utcnow()).strftime("%Y-%m-%d %H:%M"),
    )
