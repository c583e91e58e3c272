"""Tests for spreadsheet and CSV parsing and tabular record extraction."""

import io
from datetime import datetime
from pathlib import Path

import pytest
from openpyxl import Workbook

from rollcall.models.records import MaritalStatus, MemberStatus
from rollcall.services.import_service import (
    TabularExtractor,
    parse_csv,
    parse_xlsx,
    read_table,
)


def _make_xlsx(headers: list, rows: list[list]) -> bytes:
    """Create an XLSX file in memory."""
    wb = Workbook()
    ws = wb.active
    ws.append(headers)
    for row in rows:
        ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture
def extractor() -> TabularExtractor:
    return TabularExtractor()


# =============================================================================
# Raw readers
# =============================================================================


def test_parse_csv_skips_blank_rows() -> None:
    content = b"Name,Email\n\nJohn,john@x.com\n,,\nJane,jane@x.com\n"
    headers, rows = parse_csv(content)
    assert headers == ["Name", "Email"]
    assert rows == [["John", "john@x.com"], ["Jane", "jane@x.com"]]


def test_parse_csv_strips_bom() -> None:
    headers, _ = parse_csv("First Name,Last Name\nJohn,Doe\n".encode("utf-8-sig"))
    assert headers == ["First Name", "Last Name"]


def test_parse_csv_latin1_fallback() -> None:
    content = "First Name,Last Name\nJosé,Muñoz\n".encode("latin-1")
    _, rows = parse_csv(content)
    assert rows == [["José", "Muñoz"]]


def test_parse_csv_semicolon_delimiter() -> None:
    headers, rows = parse_csv(b"First Name;Last Name;Email\nJohn;Doe;john@x.com\nJane;Roe;jane@x.com\n")
    assert headers == ["First Name", "Last Name", "Email"]
    assert rows[1] == ["Jane", "Roe", "jane@x.com"]


def test_parse_csv_empty_file() -> None:
    assert parse_csv(b"") == ([], [])


def test_parse_csv_respects_max_rows() -> None:
    content = "First Name,Last Name\n" + "".join(f"A{i},B{i}\n" for i in range(20))
    _, rows = parse_csv(content.encode(), max_rows=5)
    assert len(rows) == 5


def test_parse_xlsx_keeps_cell_types() -> None:
    content = _make_xlsx(["First Name", "Birthday"], [["John", datetime(1990, 5, 15)]])
    headers, rows = parse_xlsx(content)
    assert headers == ["First Name", "Birthday"]
    assert rows[0][1] == datetime(1990, 5, 15)


def test_read_table_rejects_unknown_type() -> None:
    with pytest.raises(ValueError, match="No tabular reader"):
        read_table(b"%PDF-1.4", "pdf")


# =============================================================================
# Extraction
# =============================================================================


def test_single_valid_row_parses_without_errors(extractor: TabularExtractor) -> None:
    content = _make_xlsx(["First Name", "Last Name", "Email"], [["John", "Doe", "john@x.com"]])
    result = extractor.extract_bytes(content, "xlsx")

    assert len(result.rows) == 1
    record = result.rows[0]
    assert record.first_name == "John"
    assert record.last_name == "Doe"
    assert record.email == "john@x.com"
    assert result.errors == []


def test_row_missing_names_is_kept_and_reported(extractor: TabularExtractor) -> None:
    content = _make_xlsx(["First Name", "Last Name", "Email"], [[None, None, "john@x.com"]])
    result = extractor.extract_bytes(content, "xlsx")

    assert len(result.rows) == 1
    assert result.rows[0].email == "john@x.com"
    assert len(result.errors) == 1
    assert result.errors[0].row_index == 0
    assert result.errors[0].issues == ["Missing first name", "Missing last name"]


def test_error_row_index_is_position_among_data_rows(extractor: TabularExtractor) -> None:
    content = b"First Name,Last Name\nJohn,Doe\nJane,\n\nAmos,Moses\n,Smith\n"
    result = extractor.extract_bytes(content, "csv")

    assert [r.first_name for r in result.rows] == ["John", "Jane", "Amos", ""]
    assert [(e.row_index, e.issues) for e in result.errors] == [
        (1, ["Missing last name"]),
        (3, ["Missing first name"]),
    ]


def test_all_fields_are_normalized(extractor: TabularExtractor) -> None:
    headers = [
        "First Name", "Surname", "E-mail", "Mobile", "Address", "DOB",
        "Marital Status", "Member Status", "Cell Group", "Referred By", "Comments", "Shoe Size",
    ]
    row = [
        " Mary ", "Jones", "mary@x.com", 5551234567.0, "1 Church Lane", 33008,
        "Married", "Active", "Youth Group", "Jane Smith", "Joined at Easter", 39,
    ]
    result = extractor.extract_bytes(_make_xlsx(headers, [row]), "xlsx")
    record = result.rows[0]

    assert record.first_name == "Mary"
    assert record.phone == "5551234567"
    assert record.birthday == "1990-05-15"
    assert record.marital_status == MaritalStatus.MARRIED
    assert record.status == MemberStatus.ACTIVE
    assert record.cell_group_name == "Youth Group"
    assert record.brought_by == "Jane Smith"
    assert record.notes == "Joined at Easter"


def test_defaults_for_absent_columns(extractor: TabularExtractor) -> None:
    result = extractor.extract_bytes(b"First Name,Last Name\nJohn,Doe\n", "csv")
    record = result.rows[0]
    assert record.email is None
    assert record.birthday is None
    assert record.marital_status == MaritalStatus.UNDISCLOSED
    assert record.status == MemberStatus.PENDING_APPROVAL


def test_unparseable_birthday_becomes_absent(extractor: TabularExtractor) -> None:
    result = extractor.extract_bytes(b"First Name,Last Name,Birthday\nJohn,Doe,sometime\n", "csv")
    assert result.rows[0].birthday is None
    assert result.errors == []


def test_later_blank_duplicate_column_does_not_erase_value(extractor: TabularExtractor) -> None:
    result = extractor.extract_bytes(b"First Name,Last Name,Phone,Mobile\nJohn,Doe,555-0100,\n", "csv")
    assert result.rows[0].phone == "555-0100"


def test_short_rows_are_padded(extractor: TabularExtractor) -> None:
    result = extractor.extract_bytes(b"First Name,Last Name,Email\nJohn,Doe\n", "csv")
    assert result.rows[0].last_name == "Doe"
    assert result.rows[0].email is None


def test_headers_only_yields_nothing(extractor: TabularExtractor) -> None:
    result = extractor.extract_bytes(b"First Name,Last Name\n", "csv")
    assert result.rows == []
    assert result.errors == []


def test_extract_reads_file_type_from_suffix(extractor: TabularExtractor, tmp_path: Path) -> None:
    path = tmp_path / "list.xlsx"
    path.write_bytes(_make_xlsx(["First Name", "Last Name"], [["John", "Doe"]]))
    result = extractor.extract(path)
    assert result.rows[0].last_name == "Doe"


def test_max_rows_caps_records() -> None:
    rows = [[f"First{i}", f"Last{i}"] for i in range(10)]
    extractor = TabularExtractor(max_rows=3)
    result = extractor.extract_bytes(_make_xlsx(["First Name", "Last Name"], rows), "xlsx")
    assert len(result.rows) == 3
