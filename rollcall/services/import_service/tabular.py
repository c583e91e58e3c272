"""Extraction of member records from spreadsheets and delimited text."""

import logging
from pathlib import Path

from rollcall.models.records import ParseResult

from .constants import MAX_ROWS
from .converters import collect_results, row_to_record
from .mapping import ColumnMapper
from .normalizers import FieldNormalizer
from .parsers import read_table

logger = logging.getLogger(__name__)


class TabularExtractor:
    """Reads the first sheet of a table and converts each data row to a record."""

    def __init__(
        self,
        mapper: ColumnMapper | None = None,
        normalizer: FieldNormalizer | None = None,
        max_rows: int = MAX_ROWS,
    ) -> None:
        self.mapper = mapper or ColumnMapper()
        self.normalizer = normalizer or FieldNormalizer()
        self.max_rows = max_rows

    def extract(self, path: Path) -> ParseResult:
        """Parse a stored spreadsheet; the file type comes from its extension."""
        return self.extract_bytes(path.read_bytes(), path.suffix.lstrip("."))

    def extract_bytes(self, content: bytes, file_type: str) -> ParseResult:
        """Parse spreadsheet bytes into records and row errors.

        The column map is built once from the header row. Every data row
        yields a record, including rows missing required names; those also
        get a RowError at their zero-based data row index.
        """
        headers, rows = read_table(content, file_type, self.max_rows)
        field_map = self.mapper.build_field_map(headers)
        if rows and not field_map:
            logger.info("No recognized columns in headers: %s", headers)

        records = (
            row_to_record(
                ((field, row[index] if index < len(row) else None) for index, field in field_map.items()),
                self.normalizer,
            )
            for row in rows
        )
        result = collect_results(records)
        logger.debug(
            "Tabular extraction produced %d rows, %d errors", len(result.rows), len(result.errors)
        )
        return result
