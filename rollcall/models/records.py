"""Candidate member records and the result types produced by the import pipeline.

These are plain pydantic models: they are embedded in ``ImportSession``
documents and returned directly from the API.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

# Length ceilings for free-text values coming from uploaded documents
MAX_NAME_LENGTH = 200
MAX_FIELD_LENGTH = 500
MAX_NOTES_LENGTH = 2000


class MaritalStatus(str, Enum):
    """Marital status of a member."""

    SINGLE = "single"
    MARRIED = "married"
    UNDISCLOSED = "undisclosed"


class MemberStatus(str, Enum):
    """Approval status of a member."""

    PENDING_APPROVAL = "pending_approval"
    ACTIVE = "active"
    INACTIVE = "inactive"


class MatchType(str, Enum):
    """Criterion that identified an existing member, strongest first."""

    EMAIL = "email"
    PHONE = "phone"
    NAME_BIRTHDAY = "name_birthday"


class DuplicateInfo(BaseModel):
    """Advisory duplicate annotation shown to the reviewer. Never persisted on members."""

    is_match: bool = False
    matched_member_id: Optional[str] = None
    match_type: Optional[MatchType] = None
    matched_member_name: Optional[str] = None


class CandidateRecord(BaseModel):
    """A member record extracted from an uploaded document, awaiting review."""

    first_name: str = Field(default="", max_length=MAX_NAME_LENGTH)
    last_name: str = Field(default="", max_length=MAX_NAME_LENGTH)
    email: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)
    phone: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)
    address: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)
    birthday: Optional[str] = Field(default=None, description="Calendar date as YYYY-MM-DD")
    marital_status: MaritalStatus = MaritalStatus.UNDISCLOSED
    status: MemberStatus = MemberStatus.PENDING_APPROVAL
    cell_group_name: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)
    brought_by: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)

    duplicate_info: Optional[DuplicateInfo] = None

    @property
    def has_required_names(self) -> bool:
        """True if both first and last name are present."""
        return bool(self.first_name.strip()) and bool(self.last_name.strip())

    def without_duplicate_info(self) -> "CandidateRecord":
        """Return a copy with the advisory duplicate annotation removed."""
        return self.model_copy(update={"duplicate_info": None})


class RowError(BaseModel):
    """All defects found in one parsed row."""

    row_index: int = Field(..., ge=0, description="Zero-based position in the parsed rows")
    issues: list[str] = Field(default_factory=list)


class ParseResult(BaseModel):
    """Output of every extractor: the records found plus per-row defects."""

    rows: list[CandidateRecord] = Field(default_factory=list)
    errors: list[RowError] = Field(default_factory=list)


class CommitResult(BaseModel):
    """Aggregated outcome of committing a staged row set."""

    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)
