"""ImportSession document model for tracking member list imports."""

from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field

from rollcall.models.records import CandidateRecord, RowError


class ImportStatus(str, Enum):
    """Status of an import session."""

    PENDING = "pending"
    PARSED = "parsed"
    COMMITTED = "committed"
    FAILED = "failed"


class SourceKind(str, Enum):
    """How an uploaded document is turned into records."""

    TABULAR = "tabular"
    PDF = "pdf"
    IMAGE = "image"


class ImportSession(Document):
    """Tracks one uploaded document through the upload/parse/commit workflow."""

    created_by: Indexed(PydanticObjectId)
    filename: str
    stored_filename: str
    file_type: str  # extension, e.g. "xlsx" or "png"
    source_kind: SourceKind
    created_at: datetime = Field(default_factory=datetime.utcnow)
    status: ImportStatus = ImportStatus.PENDING

    # Last parse output; the commit fallback when no edited rows are supplied
    row_count: int = 0
    rows: list[CandidateRecord] = Field(default_factory=list)
    errors: list[RowError] = Field(default_factory=list)
    failure_message: Optional[str] = None

    parsed_at: Optional[datetime] = None
    committed_at: Optional[datetime] = None

    class Settings:
        name = "import_sessions"
