"""File reading functions for CSV, XLSX and XLS imports.

Readers return the header row and the data rows as lists of raw cell
values (first sheet only). Cell types are preserved so that date cells
and numeric date serials reach the normalizer intact.
"""

import csv
import io
from typing import Any, Iterable, Iterator

import xlrd
from openpyxl import load_workbook

from .constants import MAX_ROWS

Table = tuple[list[Any], list[list[Any]]]

CSV_DELIMITERS = ",;\t|"


def _is_blank(values: Iterable[Any]) -> bool:
    return all(v is None or str(v).strip() == "" for v in values)


def _split_table(row_iter: Iterator[Iterable[Any]], max_rows: int) -> Table:
    """Take the first non-blank row as headers and collect non-blank data rows."""
    headers: list[Any] = []
    for row in row_iter:
        if not _is_blank(row):
            headers = list(row)
            break

    rows: list[list[Any]] = []
    for row in row_iter:
        if len(rows) >= max_rows:
            break
        values = list(row)
        if not _is_blank(values):
            rows.append(values)
    return headers, rows


def _decode(content: bytes) -> str:
    """Decode CSV bytes as UTF-8 (BOM tolerant), falling back to Latin-1."""
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def parse_csv(file_content: bytes, max_rows: int = MAX_ROWS) -> Table:
    """Parse delimited text into headers and rows.

    The delimiter is sniffed from the first few kilobytes (comma, semicolon,
    tab or pipe); plain comma-separated values are assumed when sniffing fails.

    Args:
        file_content: Raw file bytes.
        max_rows: Maximum number of data rows to read.

    Returns:
        Tuple of (headers, rows). Both are empty for an empty file.
    """
    text = _decode(file_content)
    try:
        dialect: type[csv.Dialect] | csv.Dialect = csv.Sniffer().sniff(text[:4096], delimiters=CSV_DELIMITERS)
    except csv.Error:
        dialect = csv.excel

    reader = csv.reader(io.StringIO(text), dialect)
    return _split_table(reader, max_rows)


def parse_xlsx(file_content: bytes, max_rows: int = MAX_ROWS) -> Table:
    """Parse XLSX file content into headers and rows (first sheet only).

    Uses openpyxl read_only mode and iterates rows lazily to avoid loading
    the entire sheet into memory at once.
    """
    wb = load_workbook(filename=io.BytesIO(file_content), read_only=True, data_only=True)
    try:
        if not wb.worksheets:
            return [], []
        ws = wb.worksheets[0]
        return _split_table(ws.iter_rows(values_only=True), max_rows)
    finally:
        wb.close()


def _xls_cell_value(cell, datemode: int) -> Any:
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return None
    if cell.ctype == xlrd.XL_CELL_DATE:
        return xlrd.xldate_as_datetime(cell.value, datemode)
    return cell.value


def parse_xls(file_content: bytes, max_rows: int = MAX_ROWS) -> Table:
    """Parse legacy XLS file content into headers and rows (first sheet only)."""
    book = xlrd.open_workbook(file_contents=file_content)
    try:
        if book.nsheets == 0:
            return [], []
        sheet = book.sheet_by_index(0)
        row_iter = (
            [_xls_cell_value(cell, book.datemode) for cell in sheet.row(index)]
            for index in range(sheet.nrows)
        )
        return _split_table(row_iter, max_rows)
    finally:
        book.release_resources()


TABLE_READERS = {
    "csv": parse_csv,
    "xlsx": parse_xlsx,
    "xls": parse_xls,
}


def read_table(file_content: bytes, file_type: str, max_rows: int = MAX_ROWS) -> Table:
    """Read a spreadsheet or delimited file by its extension.

    Raises:
        ValueError: If the file type has no tabular reader.
    """
    reader = TABLE_READERS.get(file_type.lower())
    if reader is None:
        raise ValueError(f"No tabular reader for file type '{file_type}'")
    return reader(file_content, max_rows)
