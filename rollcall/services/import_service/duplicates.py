"""Duplicate detection against the member directory."""

import logging
from datetime import date

from rollcall.models.records import CandidateRecord, DuplicateInfo, MatchType

from .directory import DirectoryEntry, MemberDirectory

logger = logging.getLogger(__name__)


def _parse_birthday(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


async def find_existing_member(
    members: MemberDirectory,
    record: CandidateRecord,
) -> tuple[MatchType, DirectoryEntry] | None:
    """Look up the member a record most likely refers to.

    Criteria are tried strongest first and the first hit wins: exact email,
    then exact phone, then exact first name + last name + birthday. A
    criterion is skipped when the record lacks the values it needs.

    Returns:
        The match type and the matched entry, or None.
    """
    if record.email:
        entry = await members.find_by_email(record.email)
        if entry is not None:
            return MatchType.EMAIL, entry

    if record.phone:
        entry = await members.find_by_phone(record.phone)
        if entry is not None:
            return MatchType.PHONE, entry

    birthday = _parse_birthday(record.birthday)
    if birthday is not None:
        entry = await members.find_by_name_and_birthday(
            record.first_name.strip(), record.last_name.strip(), birthday
        )
        if entry is not None:
            return MatchType.NAME_BIRTHDAY, entry

    return None


class DuplicateMatcher:
    """Annotates staged records with the existing member they appear to duplicate."""

    def __init__(self, members: MemberDirectory) -> None:
        self.members = members

    async def match(self, record: CandidateRecord) -> DuplicateInfo:
        found = await find_existing_member(self.members, record)
        if found is None:
            return DuplicateInfo(is_match=False)

        match_type, entry = found
        return DuplicateInfo(
            is_match=True,
            matched_member_id=entry.member_id,
            match_type=match_type,
            matched_member_name=entry.full_name,
        )

    async def annotate(self, rows: list[CandidateRecord]) -> list[CandidateRecord]:
        """Return copies of the rows carrying their duplicate annotation."""
        annotated: list[CandidateRecord] = []
        for row in rows:
            info = await self.match(row)
            annotated.append(row.model_copy(update={"duplicate_info": info}))

        matches = sum(1 for row in annotated if row.duplicate_info and row.duplicate_info.is_match)
        logger.info("Duplicate check: %d of %d rows match existing members", matches, len(rows))
        return annotated
