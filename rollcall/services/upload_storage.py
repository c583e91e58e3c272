"""Transient storage for uploaded member list documents."""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

import aiofiles
from fastapi import UploadFile

from rollcall.config import settings
from rollcall.models.import_session import SourceKind

logger = logging.getLogger(__name__)

# Allowed file extensions and how each is parsed
ALLOWED_EXTENSIONS: dict[str, SourceKind] = {
    "xlsx": SourceKind.TABULAR,
    "xls": SourceKind.TABULAR,
    "csv": SourceKind.TABULAR,
    "pdf": SourceKind.PDF,
    "jpg": SourceKind.IMAGE,
    "jpeg": SourceKind.IMAGE,
    "png": SourceKind.IMAGE,
}

# Magic byte prefixes the content of each binary type must start with
MAGIC_SIGNATURES: dict[str, tuple[bytes, ...]] = {
    "xlsx": (b"PK\x03\x04",),
    "xls": (b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1",),
    "pdf": (b"%PDF-",),
    "jpg": (b"\xff\xd8\xff",),
    "jpeg": (b"\xff\xd8\xff",),
    "png": (b"\x89PNG\r\n\x1a\n",),
}

READ_CHUNK_SIZE = 64 * 1024


class UnsupportedFileError(Exception):
    """Raised when an upload's type or content is not accepted."""

    pass


class FileTooLargeError(Exception):
    """Raised when an upload exceeds the size limit."""

    pass


@dataclass(frozen=True)
class StoredUpload:
    """An accepted upload written to transient storage."""

    filename: str
    stored_filename: str
    file_type: str
    source_kind: SourceKind
    size: int


def get_file_extension(filename: str | None) -> str:
    """Extract the lowercase file extension from a filename."""
    if not filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def validate_content(file_type: str, content: bytes) -> None:
    """Check that file content matches its declared type.

    Raises:
        UnsupportedFileError: If the content is empty or does not match.
    """
    if not content:
        raise UnsupportedFileError("Uploaded file is empty")

    signatures = MAGIC_SIGNATURES.get(file_type)
    if signatures is not None:
        if not any(content.startswith(signature) for signature in signatures):
            raise UnsupportedFileError(
                f"File content does not match its '.{file_type}' extension"
            )
    elif b"\x00" in content[:8192]:
        # Delimited text never contains NUL bytes
        raise UnsupportedFileError("File does not appear to be a text file")


class UploadStorageService:
    """Stores uploads on local disk until their import is committed."""

    def __init__(
        self,
        storage_path: Path | None = None,
        max_size_bytes: int | None = None,
    ) -> None:
        """Initialize the upload storage service.

        Args:
            storage_path: Directory for uploads. Defaults to config setting.
            max_size_bytes: Maximum file size in bytes. Defaults to config setting.
        """
        self.storage_path = storage_path or settings.upload_dir
        self.storage_path.mkdir(parents=True, exist_ok=True)
        self.max_size_bytes = max_size_bytes or settings.max_upload_size_bytes

    def classify(self, filename: str | None) -> tuple[str, SourceKind]:
        """Return the extension and source kind for an upload filename.

        Raises:
            UnsupportedFileError: If the extension is not allowed.
        """
        ext = get_file_extension(filename)
        if ext not in ALLOWED_EXTENSIONS:
            allowed = ", ".join(sorted(ALLOWED_EXTENSIONS))
            raise UnsupportedFileError(f"Unsupported file type '.{ext}'. Allowed: {allowed}")
        return ext, ALLOWED_EXTENSIONS[ext]

    async def read_limited(self, upload_file: UploadFile) -> bytes:
        """Read an upload in chunks, stopping as soon as it exceeds the limit.

        Raises:
            FileTooLargeError: If the upload is larger than the limit.
        """
        chunks: list[bytes] = []
        total_size = 0
        while True:
            chunk = await upload_file.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            total_size += len(chunk)
            if total_size > self.max_size_bytes:
                max_mb = self.max_size_bytes / (1024 * 1024)
                raise FileTooLargeError(f"File exceeds maximum size of {max_mb:.0f} MB")
            chunks.append(chunk)
        return b"".join(chunks)

    async def save_upload(self, upload_file: UploadFile) -> StoredUpload:
        """Validate and store an uploaded document under a generated name.

        Raises:
            UnsupportedFileError: If the type or content is not accepted.
            FileTooLargeError: If the file exceeds the size limit.
        """
        ext, kind = self.classify(upload_file.filename)
        content = await self.read_limited(upload_file)
        validate_content(ext, content)

        stored_filename = f"{uuid.uuid4().hex}.{ext}"
        async with aiofiles.open(self.storage_path / stored_filename, "wb") as f:
            await f.write(content)

        logger.info("Stored upload '%s' as %s (%d bytes)", upload_file.filename, stored_filename, len(content))
        return StoredUpload(
            filename=upload_file.filename or "unknown",
            stored_filename=stored_filename,
            file_type=ext,
            source_kind=kind,
            size=len(content),
        )

    def get_path(self, stored_filename: str) -> Path | None:
        """Get the full path to a stored upload, or None if it is gone."""
        file_path = self.storage_path / Path(stored_filename).name
        if file_path.exists():
            return file_path
        return None

    def delete(self, stored_filename: str) -> bool:
        """Delete a stored upload.

        Returns:
            True if deleted, False if not found.
        """
        file_path = self.storage_path / Path(stored_filename).name
        if file_path.exists():
            file_path.unlink()
            return True
        return False
