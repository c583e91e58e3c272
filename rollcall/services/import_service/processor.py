"""Import session lifecycle: parse a stored upload, then commit its rows."""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Iterable, Optional

from beanie.operators import Set

from rollcall.models.import_session import ImportSession, ImportStatus, SourceKind
from rollcall.models.records import CandidateRecord, CommitResult, ParseResult
from rollcall.services.upload_storage import UploadStorageService

from .commit import CommitEngine
from .directory import BeanieGroupDirectory, BeanieMemberDirectory, GroupDirectory, MemberDirectory
from .duplicates import DuplicateMatcher
from .extractors import RecordExtractor, build_extractor

logger = logging.getLogger(__name__)


class ImportStateError(Exception):
    """Raised when an operation is not allowed in the session's current state."""

    pass


class ImportFileMissingError(Exception):
    """Raised when the stored upload for a session no longer exists."""

    pass


class ImportParseError(Exception):
    """Raised when extraction fails; the session is marked failed."""

    pass


async def parse_import_session(
    session: ImportSession,
    storage: UploadStorageService,
    check_duplicates: bool = False,
    members: Optional[MemberDirectory] = None,
    extractor_factory: Callable[[SourceKind], RecordExtractor] = build_extractor,
) -> ParseResult:
    """Extract candidate records from a session's stored upload.

    Parsing may be repeated until the session is committed; each run
    replaces the stored rows and errors.

    Args:
        session: The import session to parse.
        storage: Storage holding the uploaded file.
        check_duplicates: Annotate each row with its likely existing member.
        members: Member directory for the duplicate check.
        extractor_factory: Builds the extractor for the session's source kind.

    Returns:
        The parsed rows and per-row errors.

    Raises:
        ImportStateError: If the session was already committed.
        ImportFileMissingError: If the stored upload is gone.
        ImportParseError: If extraction or the duplicate check failed.
    """
    if session.status == ImportStatus.COMMITTED:
        raise ImportStateError("Import has already been committed")

    path = storage.get_path(session.stored_filename)
    if path is None:
        raise ImportFileMissingError("File not found on server")

    try:
        extractor = extractor_factory(session.source_kind)
        result = await asyncio.to_thread(extractor.extract, path)
        rows = result.rows
        if check_duplicates:
            matcher = DuplicateMatcher(members or BeanieMemberDirectory())
            rows = await matcher.annotate(rows)
    except Exception as e:
        logger.exception("Parse failed for import %s (%s)", session.id, session.filename)
        session.status = ImportStatus.FAILED
        session.failure_message = str(e)
        session.rows = []
        session.errors = []
        session.row_count = 0
        await session.save()
        raise ImportParseError("Failed to parse file") from e

    session.rows = rows
    session.errors = result.errors
    session.row_count = len(rows)
    session.status = ImportStatus.PARSED
    session.failure_message = None
    session.parsed_at = datetime.utcnow()
    await session.save()

    logger.info(
        "Parsed import %s: %d rows, %d with errors",
        session.id,
        len(rows),
        len(result.errors),
    )
    return ParseResult(rows=rows, errors=result.errors)


async def claim_for_commit(session: ImportSession) -> bool:
    """Atomically move a parsed session to committed.

    Returns False when another request changed the status first.
    """
    result = await ImportSession.find_one(
        ImportSession.id == session.id,
        ImportSession.status == ImportStatus.PARSED,
    ).update(Set({ImportSession.status: ImportStatus.COMMITTED}))
    return result is not None and result.modified_count == 1


async def commit_import_session(
    session: ImportSession,
    storage: UploadStorageService,
    rows: Optional[list[CandidateRecord]] = None,
    skipped_indices: Iterable[int] = (),
    members: Optional[MemberDirectory] = None,
    groups: Optional[GroupDirectory] = None,
    claim: Callable[[ImportSession], Awaitable[bool]] = claim_for_commit,
) -> CommitResult:
    """Write a parsed session's rows to the member directory.

    Args:
        session: The import session to commit.
        storage: Storage holding the uploaded file, removed after commit.
        rows: Reviewed rows; the session's stored rows are used when None.
        skipped_indices: Zero-based row positions to leave out.
        members: Member directory to write to.
        groups: Cell group directory used to resolve group names.
        claim: Marks the session committed before any member is written.

    Raises:
        ImportStateError: If the session is not parsed, has no rows, or was
            committed by a concurrent request.
    """
    if session.status != ImportStatus.PARSED:
        raise ImportStateError("Import must be parsed before committing")

    staged = list(rows) if rows is not None else list(session.rows)
    if not staged:
        raise ImportStateError("No data to import")

    if not await claim(session):
        raise ImportStateError("Import has already been committed")
    session.status = ImportStatus.COMMITTED

    engine = CommitEngine(members or BeanieMemberDirectory(), groups or BeanieGroupDirectory())
    result = await engine.commit(staged, skipped_indices)

    session.committed_at = datetime.utcnow()
    await session.save()

    try:
        storage.delete(session.stored_filename)
    except OSError as e:
        logger.warning("Could not remove upload %s: %s", session.stored_filename, e)

    logger.info(
        "Committed import %s: %d created, %d updated, %d skipped",
        session.id,
        result.created,
        result.updated,
        result.skipped,
    )
    return result
