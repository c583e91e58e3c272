"""MongoDB document models for Rollcall."""

from rollcall.models.import_session import ImportSession, ImportStatus, SourceKind
from rollcall.models.member import CellGroup, Member
from rollcall.models.records import (
    CandidateRecord,
    CommitResult,
    DuplicateInfo,
    MaritalStatus,
    MatchType,
    MemberStatus,
    ParseResult,
    RowError,
)
from rollcall.models.user import User, UserRole

__all__ = [
    # Main documents
    "User",
    "UserRole",
    "Member",
    "CellGroup",
    # Import
    "ImportSession",
    "ImportStatus",
    "SourceKind",
    # Embedded records and results
    "CandidateRecord",
    "DuplicateInfo",
    "RowError",
    "ParseResult",
    "CommitResult",
    "MaritalStatus",
    "MemberStatus",
    "MatchType",
]
