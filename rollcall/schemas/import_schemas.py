"""Pydantic schemas for member list import functionality."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from rollcall.config import settings
from rollcall.models.import_session import ImportStatus, SourceKind
from rollcall.models.records import CandidateRecord, RowError


class ImportUploadResponse(BaseModel):
    """Response after uploading a member list document."""

    import_id: str
    filename: str
    stored_filename: str
    source_kind: SourceKind


class ImportParseResponse(BaseModel):
    """Candidate records extracted from an uploaded document."""

    import_id: str
    filename: str
    rows: list[CandidateRecord]
    errors: list[RowError]


class ImportCommitRequest(BaseModel):
    """Reviewed rows to commit to the member directory."""

    rows: Optional[list[CandidateRecord]] = Field(
        None,
        description="Edited rows; the parsed rows are used when omitted",
    )
    skipped_indices: list[int] = Field(
        default_factory=list,
        description="Zero-based positions of rows to leave out",
    )

    @field_validator("rows", "skipped_indices")
    @classmethod
    def within_row_limit(cls, value):
        limit = settings.import_max_rows
        if value is not None and len(value) > limit:
            raise ValueError(f"At most {limit} rows can be committed at once")
        return value


class ImportSessionDetail(BaseModel):
    """Metadata of one import session."""

    id: str
    filename: str
    file_type: str
    source_kind: SourceKind
    status: ImportStatus
    row_count: int
    errors: list[RowError]
    failure_message: Optional[str] = None
    created_at: datetime
    parsed_at: Optional[datetime] = None
    committed_at: Optional[datetime] = None


class ImportSessionSummary(BaseModel):
    """Summary of an import session for listing."""

    id: str
    filename: str
    file_type: str
    status: ImportStatus
    row_count: int
    created_at: datetime
