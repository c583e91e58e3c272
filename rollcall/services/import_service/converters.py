"""Conversion of mapped row values into candidate records."""

from typing import Any, Iterable

from rollcall.models.records import CandidateRecord, ParseResult, RowError

from .constants import MISSING_FIRST_NAME, MISSING_LAST_NAME
from .normalizers import FieldNormalizer, clean_string


def row_to_record(
    values: Iterable[tuple[str, Any]],
    normalizer: FieldNormalizer,
) -> CandidateRecord:
    """Build a candidate record from (field, raw value) pairs.

    Pairs are applied in order. A blank value never overwrites a value an
    earlier column already supplied for the same field.

    Args:
        values: Canonical field name and raw cell value, in column order.
        normalizer: Normalizer applied to every value.

    Returns:
        The record. Missing names are left empty, not rejected.
    """
    data: dict[str, Any] = {}
    for field, raw in values:
        if field in data and clean_string(raw) is None:
            continue
        value = normalizer.normalize(field, raw)
        if value is None:
            continue
        data[field] = value
    return CandidateRecord(**data)


def validate_record(record: CandidateRecord) -> list[str]:
    """List the defects that would prevent a record from being committed."""
    issues: list[str] = []
    if not record.first_name.strip():
        issues.append(MISSING_FIRST_NAME)
    if not record.last_name.strip():
        issues.append(MISSING_LAST_NAME)
    return issues


def collect_results(records: Iterable[CandidateRecord]) -> ParseResult:
    """Validate records in order and pair them with their row errors.

    Invalid records are kept so the reviewer can fix them.
    """
    result = ParseResult()
    for index, record in enumerate(records):
        issues = validate_record(record)
        if issues:
            result.errors.append(RowError(row_index=index, issues=issues))
        result.rows.append(record)
    return result
