"""Downloadable spreadsheet template for member imports."""

import io

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .constants import TEMPLATE_COLUMN_WIDTHS, TEMPLATE_ROWS

TEMPLATE_SHEET_TITLE = "Members"
TEMPLATE_FILENAME = "member-import-template.xlsx"


def build_template_workbook() -> bytes:
    """Build the member import template as XLSX bytes.

    The header row uses the display names the column mapper recognizes,
    followed by sample rows.
    """
    headers = list(TEMPLATE_ROWS[0].keys())

    wb = Workbook()
    ws = wb.active
    ws.title = TEMPLATE_SHEET_TITLE

    header_font = Font(bold=True)
    header_fill = PatternFill(start_color="DDEBF7", end_color="DDEBF7", fill_type="solid")
    header_alignment = Alignment(horizontal="center")

    for col_idx, header in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment
        ws.column_dimensions[get_column_letter(col_idx)].width = TEMPLATE_COLUMN_WIDTHS.get(header, 15)

    for row_idx, sample in enumerate(TEMPLATE_ROWS, 2):
        for col_idx, header in enumerate(headers, 1):
            ws.cell(row=row_idx, column=col_idx, value=sample.get(header))

    ws.freeze_panes = "A2"

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()
