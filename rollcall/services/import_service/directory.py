"""Member and cell group directories consulted by the import pipeline.

The matcher and commit engine only see the protocols below. The Beanie
implementations back them with the ``members`` and ``cell_groups``
collections.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Protocol

from beanie import PydanticObjectId

from rollcall.models.member import CellGroup, Member

# Member field values keyed by Member attribute name; birthday is a date,
# cell_group_id a string id or None
MemberData = dict[str, Any]


@dataclass(frozen=True)
class DirectoryEntry:
    """An existing member found by a lookup."""

    member_id: str
    full_name: str


class MemberDirectory(Protocol):
    async def find_by_email(self, email: str) -> DirectoryEntry | None: ...

    async def find_by_phone(self, phone: str) -> DirectoryEntry | None: ...

    async def find_by_name_and_birthday(
        self, first_name: str, last_name: str, birthday: date
    ) -> DirectoryEntry | None: ...

    async def create(self, data: MemberData) -> str: ...

    async def update(self, member_id: str, data: MemberData) -> None: ...


class GroupDirectory(Protocol):
    async def find_id_by_name(self, name: str) -> str | None: ...


def _entry(member: Member | None) -> DirectoryEntry | None:
    if member is None:
        return None
    return DirectoryEntry(member_id=str(member.id), full_name=member.full_name)


def _birthday_datetime(value: date) -> datetime:
    return datetime(value.year, value.month, value.day)


class BeanieMemberDirectory:
    """Member directory stored in MongoDB."""

    async def find_by_email(self, email: str) -> DirectoryEntry | None:
        return _entry(await Member.find_one(Member.email == email))

    async def find_by_phone(self, phone: str) -> DirectoryEntry | None:
        return _entry(await Member.find_one(Member.phone == phone))

    async def find_by_name_and_birthday(
        self, first_name: str, last_name: str, birthday: date
    ) -> DirectoryEntry | None:
        member = await Member.find_one(
            Member.first_name == first_name,
            Member.last_name == last_name,
            Member.birthday == _birthday_datetime(birthday),
        )
        return _entry(member)

    @staticmethod
    def _document_fields(data: MemberData) -> dict[str, Any]:
        fields = dict(data)
        if fields.get("birthday") is not None:
            fields["birthday"] = _birthday_datetime(fields["birthday"])
        if fields.get("cell_group_id") is not None:
            fields["cell_group_id"] = PydanticObjectId(fields["cell_group_id"])
        return fields

    async def create(self, data: MemberData) -> str:
        member = Member(**self._document_fields(data))
        await member.insert()
        return str(member.id)

    async def update(self, member_id: str, data: MemberData) -> None:
        member = await Member.get(PydanticObjectId(member_id))
        if member is None:
            raise LookupError(f"Member {member_id} no longer exists")

        for key, value in self._document_fields(data).items():
            setattr(member, key, value)
        member.updated_at = datetime.utcnow()
        await member.save()


class BeanieGroupDirectory:
    """Case-insensitive cell group lookup, loaded once per instance."""

    def __init__(self) -> None:
        self._ids_by_name: dict[str, str] | None = None

    async def find_id_by_name(self, name: str) -> str | None:
        if self._ids_by_name is None:
            groups = await CellGroup.find_all().to_list()
            self._ids_by_name = {group.name.lower(): str(group.id) for group in groups}
        return self._ids_by_name.get(name.lower())
