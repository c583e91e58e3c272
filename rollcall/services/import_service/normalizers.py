"""Pure conversions from raw cell or text values to canonical member field values.

Every function here is total: malformed input yields a default or None,
never an exception.
"""

import re
from datetime import date, datetime
from typing import Any, Mapping, Sequence

from dateutil import parser as date_parser
from openpyxl.utils.datetime import from_excel

from rollcall.models.records import (
    MAX_FIELD_LENGTH,
    MAX_NAME_LENGTH,
    MAX_NOTES_LENGTH,
    MaritalStatus,
    MemberStatus,
)

# Recognized date layouts, tried in order. Groups name the date parts.
DATE_PATTERNS: tuple[tuple[re.Pattern[str], tuple[str, str, str]], ...] = (
    (re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"), ("year", "month", "day")),
    (re.compile(r"^(\d{2})/(\d{2})/(\d{4})$"), ("month", "day", "year")),
    (re.compile(r"^(\d{2})-(\d{2})-(\d{4})$"), ("month", "day", "year")),
    (re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})$"), ("day", "month", "year")),
)

# Largest spreadsheet serial that still maps to a representable date (9999-12-31)
MAX_EXCEL_SERIAL = 2958465

_FALLBACK_DEFAULTS = (datetime(1904, 1, 1), datetime(1905, 2, 2))

FIELD_LENGTH_LIMITS: Mapping[str, int] = {
    "first_name": MAX_NAME_LENGTH,
    "last_name": MAX_NAME_LENGTH,
    "notes": MAX_NOTES_LENGTH,
}

_WHITESPACE = re.compile(r"\s+")


def clean_string(value: Any, max_length: int = MAX_FIELD_LENGTH) -> str | None:
    """Trim a raw value to a string; empty means absent (None)."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        # Spreadsheets store numeric cells (phone numbers, ids) as floats
        value = int(value)
    text = str(value).strip()
    if not text:
        return None
    return text[:max_length]


def _date_from_serial(serial: float) -> date | None:
    if not 1 <= serial <= MAX_EXCEL_SERIAL:
        return None
    try:
        return from_excel(serial).date()
    except (ValueError, OverflowError, TypeError):
        return None


def normalize_date(
    value: Any,
    patterns: Sequence[tuple[re.Pattern[str], tuple[str, str, str]]] = DATE_PATTERNS,
) -> str | None:
    """Normalize a date cell or string to YYYY-MM-DD.

    Accepts date/datetime objects, spreadsheet numeric serials, and strings
    in any of the recognized layouts. Other strings go through general date
    parsing. Returns None when nothing yields a valid calendar date.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    if isinstance(value, (int, float)):
        parsed = _date_from_serial(value)
        return parsed.isoformat() if parsed else None

    text = str(value).strip()
    if not text:
        return None

    for pattern, parts in patterns:
        match = pattern.match(text)
        if not match:
            continue
        values = dict(zip(parts, (int(group) for group in match.groups())))
        try:
            return date(values["year"], values["month"], values["day"]).isoformat()
        except ValueError:
            # Right shape, impossible date (e.g. day-first 13/05/1990)
            break

    # Parts missing from the text are filled from the default; two different
    # defaults only agree when the text names year, month and day
    try:
        first = date_parser.parse(text, default=_FALLBACK_DEFAULTS[0])
        second = date_parser.parse(text, default=_FALLBACK_DEFAULTS[1])
    except (ValueError, OverflowError):
        return None
    if first.date() != second.date():
        return None
    return first.date().isoformat()


def normalize_marital_status(value: Any) -> MaritalStatus:
    """Map a raw value to a marital status; anything unrecognized is undisclosed."""
    normalized = str(value or "").lower().strip()
    if normalized == MaritalStatus.SINGLE.value:
        return MaritalStatus.SINGLE
    if normalized == MaritalStatus.MARRIED.value:
        return MaritalStatus.MARRIED
    return MaritalStatus.UNDISCLOSED


def normalize_member_status(value: Any) -> MemberStatus:
    """Map a raw value to a member status; anything unrecognized is pending approval."""
    normalized = _WHITESPACE.sub("_", str(value or "").lower().strip())
    if normalized == MemberStatus.ACTIVE.value:
        return MemberStatus.ACTIVE
    if normalized == MemberStatus.INACTIVE.value:
        return MemberStatus.INACTIVE
    return MemberStatus.PENDING_APPROVAL


class FieldNormalizer:
    """Applies the normalization rule that belongs to each canonical field."""

    def __init__(
        self,
        date_patterns: Sequence[tuple[re.Pattern[str], tuple[str, str, str]]] = DATE_PATTERNS,
        length_limits: Mapping[str, int] = FIELD_LENGTH_LIMITS,
    ) -> None:
        self._date_patterns = tuple(date_patterns)
        self._length_limits = dict(length_limits)

    def normalize(self, field: str, value: Any) -> Any:
        """Return the canonical value of ``field`` for a raw ``value``.

        Name fields never return None (an absent name is the empty string);
        other free-text fields return None when empty.
        """
        if field == "birthday":
            return normalize_date(value, self._date_patterns)
        if field == "marital_status":
            return normalize_marital_status(value)
        if field == "status":
            return normalize_member_status(value)

        max_length = self._length_limits.get(field, MAX_FIELD_LENGTH)
        cleaned = clean_string(value, max_length)
        if field in ("first_name", "last_name"):
            return cleaned or ""
        return cleaned
