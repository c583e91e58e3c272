"""Best-effort extraction of member records from unstructured text.

Text recovered from PDFs and photographs has no reliable grammar. The
extractor first looks for a header line near the top of the text and, if
one is found, treats the rest as a table split on the same separator.
Otherwise every line is scanned with an ordered list of field patterns.
Recall matters more than precision here; the reviewer corrects the rest.
"""

import csv
import logging
import re
from dataclasses import dataclass
from typing import Callable, Sequence

from rollcall.models.records import CandidateRecord, ParseResult, RowError

from .constants import HEADER_KEYWORDS, HEADER_SCAN_LINES, MAX_ROWS, NO_RECORDS_FOUND
from .converters import collect_results, row_to_record
from .mapping import ColumnMapper
from .normalizers import FieldNormalizer

logger = logging.getLogger(__name__)

# Lines are clipped before pattern matching
MAX_LINE_LENGTH = 1000

Splitter = Callable[[str], list[str]]

_MULTI_SPACE = re.compile(r"\s{2,}")


def split_tab(line: str) -> list[str]:
    return line.split("\t")


def split_comma(line: str) -> list[str]:
    """Split on commas outside double-quoted fields."""
    try:
        return next(csv.reader([line], skipinitialspace=True), [])
    except csv.Error:
        return [line]


def split_spaces(line: str) -> list[str]:
    return _MULTI_SPACE.split(line)


def split_pipe(line: str) -> list[str]:
    return line.split("|")


# Candidate separators in priority order
SEPARATORS: tuple[tuple[str, Splitter], ...] = (
    ("tab", split_tab),
    ("comma", split_comma),
    ("spaces", split_spaces),
    ("pipe", split_pipe),
)


@dataclass(frozen=True)
class FieldPattern:
    """A regular expression that fills one or more fields from a line.

    Capture groups fill ``fields`` in order; a pattern without groups fills
    its single field with the whole match.
    """

    fields: tuple[str, ...]
    pattern: re.Pattern[str]
    required: bool = False

    def extract(self, line: str) -> dict[str, str] | None:
        match = self.pattern.search(line)
        if match is None:
            return None
        groups = match.groups() or (match.group(0),)
        return dict(zip(self.fields, groups))


# Fallback patterns, applied to each line in order
FALLBACK_PATTERNS: tuple[FieldPattern, ...] = (
    FieldPattern(
        fields=("first_name", "last_name"),
        pattern=re.compile(r"^([A-Z][a-z]+)\s+([A-Z][a-z]+)"),
        required=True,
    ),
    FieldPattern(
        fields=("email",),
        pattern=re.compile(r"[\w.-]+@[\w.-]+\.\w+"),
    ),
    FieldPattern(
        fields=("phone",),
        pattern=re.compile(r"(?:\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}"),
    ),
)


@dataclass(frozen=True)
class DetectedHeader:
    """A header line found in the text and the separator that splits it."""

    line_index: int
    separator: str
    splitter: Splitter
    columns: list[str]


class HeuristicTextExtractor:
    """Turns a blob of extracted text into candidate records."""

    def __init__(
        self,
        mapper: ColumnMapper | None = None,
        normalizer: FieldNormalizer | None = None,
        separators: Sequence[tuple[str, Splitter]] = SEPARATORS,
        patterns: Sequence[FieldPattern] = FALLBACK_PATTERNS,
        header_keywords: Sequence[str] = HEADER_KEYWORDS,
        header_scan_lines: int = HEADER_SCAN_LINES,
        max_rows: int = MAX_ROWS,
    ) -> None:
        self.mapper = mapper or ColumnMapper()
        self.normalizer = normalizer or FieldNormalizer()
        self.separators = tuple(separators)
        self.patterns = tuple(patterns)
        self.header_keywords = tuple(k.lower() for k in header_keywords)
        self.header_scan_lines = header_scan_lines
        self.max_rows = max_rows

    def extract_text(self, text: str) -> ParseResult:
        """Parse text into records, using a detected table layout when possible."""
        lines = [line.strip()[:MAX_LINE_LENGTH] for line in text.splitlines()]
        lines = [line for line in lines if line]

        header = self.find_header(lines)
        if header is not None:
            logger.debug(
                "Detected header on line %d using %s separator: %s",
                header.line_index,
                header.separator,
                header.columns,
            )
            return self.parse_table(lines[header.line_index + 1:], header)

        logger.debug("No header found in %d lines, using pattern fallback", len(lines))
        return self.parse_fallback(lines)

    def find_header(self, lines: Sequence[str]) -> DetectedHeader | None:
        """Find the first header-like line among the leading lines.

        A line qualifies if it mentions a header keyword and one of the
        separators splits it into at least two non-empty parts.
        """
        for index, line in enumerate(lines[: self.header_scan_lines]):
            lowered = line.lower()
            if not any(keyword in lowered for keyword in self.header_keywords):
                continue
            for name, splitter in self.separators:
                parts = [part.strip() for part in splitter(line) if part.strip()]
                if len(parts) >= 2:
                    return DetectedHeader(index, name, splitter, parts)
        return None

    def parse_table(self, lines: Sequence[str], header: DetectedHeader) -> ParseResult:
        """Split data lines like the header and map values by position."""
        field_map = self.mapper.build_field_map(header.columns)
        records = []
        for line in lines[: self.max_rows]:
            parts = [part.strip() for part in header.splitter(line)]
            records.append(
                row_to_record(
                    ((field, parts[index] if index < len(parts) else None) for index, field in field_map.items()),
                    self.normalizer,
                )
            )
        return collect_results(records)

    def parse_fallback(self, lines: Sequence[str]) -> ParseResult:
        """Scan each line independently with the fallback patterns.

        Lines that do not match every required pattern are dropped.
        """
        result = ParseResult()
        for line in lines:
            if len(result.rows) >= self.max_rows:
                break
            record = self._match_line(line)
            if record is not None:
                result.rows.append(record)

        if not result.rows:
            result.errors.append(RowError(row_index=0, issues=[NO_RECORDS_FOUND]))
        return result

    def _match_line(self, line: str) -> CandidateRecord | None:
        values: list[tuple[str, str]] = []
        for field_pattern in self.patterns:
            found = field_pattern.extract(line)
            if found is None:
                if field_pattern.required:
                    return None
                continue
            values.extend(found.items())
        return row_to_record(values, self.normalizer)
