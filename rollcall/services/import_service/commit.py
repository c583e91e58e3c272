"""Application of reviewed import rows to the member directory."""

import logging
from datetime import date
from typing import Iterable, Sequence

from rollcall.models.records import CandidateRecord, CommitResult

from .directory import GroupDirectory, MemberData, MemberDirectory
from .duplicates import find_existing_member

logger = logging.getLogger(__name__)


def record_to_member_data(record: CandidateRecord, cell_group_id: str | None) -> MemberData:
    """Convert a reviewed record to member field values.

    Raises:
        ValueError: If the birthday is not a valid YYYY-MM-DD date.
    """
    return {
        "first_name": record.first_name.strip(),
        "last_name": record.last_name.strip(),
        "email": record.email or None,
        "phone": record.phone or None,
        "address": record.address or None,
        "birthday": date.fromisoformat(record.birthday) if record.birthday else None,
        "marital_status": record.marital_status,
        "status": record.status,
        "cell_group_id": cell_group_id,
        "brought_by": record.brought_by or None,
        "notes": record.notes or None,
    }


class CommitEngine:
    """Creates or updates one member per staged row.

    Each row is handled on its own: a failing row is counted as skipped and
    reported, and the remaining rows are still processed.
    """

    def __init__(self, members: MemberDirectory, groups: GroupDirectory) -> None:
        self.members = members
        self.groups = groups

    async def commit(
        self,
        rows: Sequence[CandidateRecord],
        skipped_indices: Iterable[int] = (),
    ) -> CommitResult:
        """Commit rows in order.

        Args:
            rows: Reviewed rows. Duplicate annotations are ignored; the
                existing member is looked up again for every row.
            skipped_indices: Zero-based row positions the reviewer excluded.

        Returns:
            Counts of created, updated and skipped rows plus row-numbered errors.
        """
        skip = set(skipped_indices)
        result = CommitResult()

        for index, row in enumerate(rows):
            row_number = index + 1
            if index in skip:
                result.skipped += 1
                continue

            record = row.without_duplicate_info()
            if not record.has_required_names:
                result.skipped += 1
                result.errors.append(f"Row {row_number}: Missing first or last name")
                continue

            try:
                created = await self._apply(record)
            except Exception as e:
                result.skipped += 1
                result.errors.append(f"Row {row_number}: {e}")
                logger.warning("Import commit error on row %d: %s", row_number, e)
                continue

            if created:
                result.created += 1
            else:
                result.updated += 1

        return result

    async def _apply(self, record: CandidateRecord) -> bool:
        """Write one record; returns True if a member was created."""
        found = await find_existing_member(self.members, record)

        cell_group_id = None
        if record.cell_group_name:
            cell_group_id = await self.groups.find_id_by_name(record.cell_group_name)

        data = record_to_member_data(record, cell_group_id)
        if found is not None:
            _, entry = found
            await self.members.update(entry.member_id, data)
            return False

        await self.members.create(data)
        return True
