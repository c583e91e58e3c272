"""Pydantic schemas for Rollcall API."""

from rollcall.schemas.import_schemas import (
    ImportCommitRequest,
    ImportParseResponse,
    ImportSessionDetail,
    ImportSessionSummary,
    ImportUploadResponse,
)

__all__ = [
    "ImportCommitRequest",
    "ImportParseResponse",
    "ImportSessionDetail",
    "ImportSessionSummary",
    "ImportUploadResponse",
]
