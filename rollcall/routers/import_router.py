"""Import endpoints for uploading, reviewing and committing member lists."""

import logging

from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, File, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import Response
from slowapi import Limiter
from slowapi.util import get_remote_address

from rollcall.config import settings
from rollcall.models.import_session import ImportSession
from rollcall.models.records import CommitResult
from rollcall.models.user import User
from rollcall.schemas.import_schemas import (
    ImportCommitRequest,
    ImportParseResponse,
    ImportSessionDetail,
    ImportSessionSummary,
    ImportUploadResponse,
)
from rollcall.services.auth import RequireAdmin, RequireAuth
from rollcall.services.import_service import (
    TEMPLATE_FILENAME,
    ImportFileMissingError,
    ImportParseError,
    ImportStateError,
    build_template_workbook,
    commit_import_session,
    parse_import_session,
)
from rollcall.services.upload_storage import (
    FileTooLargeError,
    UnsupportedFileError,
    UploadStorageService,
)

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)

upload_storage = UploadStorageService()

RECENT_SESSIONS_LIMIT = 50
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _upload_rate_limit() -> str:
    return settings.upload_rate_limit


@router.get("/template")
async def download_template(current_user: RequireAuth) -> Response:
    """Download an XLSX template with every recognized column and sample rows."""
    return Response(
        content=build_template_workbook(),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'},
    )


@router.post("/upload", response_model=ImportUploadResponse)
@limiter.limit(_upload_rate_limit)
async def upload_member_list(
    request: Request,
    current_user: RequireAuth,
    file: UploadFile = File(..., description="Spreadsheet, CSV, PDF or photo of a member list"),
) -> ImportUploadResponse:
    """Upload a member list document and open a pending import session."""
    try:
        stored = await upload_storage.save_upload(file)
    except UnsupportedFileError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except FileTooLargeError as e:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(e),
        )

    session = ImportSession(
        created_by=current_user.id,
        filename=stored.filename,
        stored_filename=stored.stored_filename,
        file_type=stored.file_type,
        source_kind=stored.source_kind,
    )
    await session.insert()

    logger.info(
        "Import %s opened by user %s: %s (%s, %d bytes)",
        session.id,
        current_user.id,
        stored.filename,
        stored.source_kind.value,
        stored.size,
    )
    return ImportUploadResponse(
        import_id=str(session.id),
        filename=session.filename,
        stored_filename=session.stored_filename,
        source_kind=session.source_kind,
    )


@router.post("/{import_id}/parse", response_model=ImportParseResponse)
async def parse_import(
    import_id: str,
    current_user: RequireAuth,
    check_duplicates: bool = Query(False, description="Annotate rows that match existing members"),
) -> ImportParseResponse:
    """Extract candidate member records from the uploaded document."""
    session = await _get_session(import_id, current_user)

    try:
        result = await parse_import_session(session, upload_storage, check_duplicates=check_duplicates)
    except ImportStateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ImportFileMissingError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ImportParseError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return ImportParseResponse(
        import_id=str(session.id),
        filename=session.filename,
        rows=result.rows,
        errors=result.errors,
    )


@router.post("/{import_id}/commit", response_model=CommitResult)
async def commit_import(
    import_id: str,
    current_user: RequireAdmin,
    request: ImportCommitRequest | None = None,
) -> CommitResult:
    """Create or update members from the reviewed rows."""
    session = await _get_session(import_id, current_user)
    opts = request or ImportCommitRequest()

    try:
        return await commit_import_session(
            session,
            upload_storage,
            rows=opts.rows,
            skipped_indices=opts.skipped_indices,
        )
    except ImportStateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=list[ImportSessionSummary])
async def list_imports(
    current_user: RequireAuth,
) -> list[ImportSessionSummary]:
    """List the current user's most recent import sessions."""
    sessions = (
        await ImportSession.find(ImportSession.created_by == current_user.id)
        .sort(-ImportSession.created_at)
        .limit(RECENT_SESSIONS_LIMIT)
        .to_list()
    )

    return [
        ImportSessionSummary(
            id=str(s.id),
            filename=s.filename,
            file_type=s.file_type,
            status=s.status,
            row_count=s.row_count,
            created_at=s.created_at,
        )
        for s in sessions
    ]


@router.get("/{import_id}", response_model=ImportSessionDetail)
async def get_import(
    import_id: str,
    current_user: RequireAuth,
) -> ImportSessionDetail:
    """Get details of an import session."""
    session = await _get_session(import_id, current_user)
    return ImportSessionDetail(
        id=str(session.id),
        filename=session.filename,
        file_type=session.file_type,
        source_kind=session.source_kind,
        status=session.status,
        row_count=session.row_count,
        errors=session.errors,
        failure_message=session.failure_message,
        created_at=session.created_at,
        parsed_at=session.parsed_at,
        committed_at=session.committed_at,
    )


async def _get_session(import_id: str, user: User) -> ImportSession:
    """Get an import session the user may access.

    Sessions are visible to their creator and to super admins.

    Raises:
        HTTPException: If the session is not found or not accessible.
    """
    try:
        session = await ImportSession.get(PydanticObjectId(import_id))
    except (InvalidId, TypeError):
        session = None

    if session is None or (session.created_by != user.id and not user.is_admin):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Import '{import_id}' not found",
        )

    return session
