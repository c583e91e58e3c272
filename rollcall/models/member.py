"""Member directory documents."""

from datetime import datetime
from typing import Optional

from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field

from rollcall.models.records import MaritalStatus, MemberStatus


class Member(Document):
    """A member of the congregation directory."""

    first_name: Indexed(str)
    last_name: Indexed(str)
    email: Optional[Indexed(str)] = None
    phone: Optional[Indexed(str)] = None
    address: Optional[str] = None
    # Stored as midnight UTC; BSON has no date-only type
    birthday: Optional[datetime] = None
    marital_status: MaritalStatus = MaritalStatus.UNDISCLOSED
    status: MemberStatus = MemberStatus.PENDING_APPROVAL
    cell_group_id: Optional[PydanticObjectId] = None
    brought_by: Optional[str] = None
    notes: Optional[str] = None

    date_joined: datetime = Field(default_factory=datetime.utcnow)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "members"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class CellGroup(Document):
    """A cell group members can be assigned to."""

    name: Indexed(str)
    description: Optional[str] = None
    leader_id: Optional[PydanticObjectId] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "cell_groups"
