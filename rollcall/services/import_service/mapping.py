"""Column header mapping for member imports."""

import logging
from types import MappingProxyType
from typing import Mapping, Sequence

from .constants import HEADER_ALIASES

logger = logging.getLogger(__name__)


class ColumnMapper:
    """Maps free-form column headers onto canonical member field names.

    Matching is case-insensitive and ignores surrounding whitespace. The
    alias table is copied into a read-only mapping at construction.
    """

    def __init__(self, aliases: Mapping[str, str] = HEADER_ALIASES) -> None:
        self._aliases: Mapping[str, str] = MappingProxyType(
            {alias.lower().strip(): field for alias, field in aliases.items()}
        )

    @property
    def aliases(self) -> Mapping[str, str]:
        return self._aliases

    def map_header(self, header: object) -> str | None:
        """Return the canonical field for a header, or None if unmapped."""
        if header is None:
            return None
        return self._aliases.get(str(header).lower().strip())

    def build_field_map(self, headers: Sequence[object]) -> dict[int, str]:
        """Map column positions to canonical fields.

        Unmapped headers are left out; their column values are dropped.

        Args:
            headers: Header cells in column order.

        Returns:
            Dict of column index -> member field name.
        """
        field_map: dict[int, str] = {}
        for index, header in enumerate(headers):
            field = self.map_header(header)
            if field is not None:
                field_map[index] = field
            elif header not in (None, ""):
                logger.debug("Ignoring unmapped column '%s'", header)
        return field_map

