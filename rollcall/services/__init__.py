"""Services for Rollcall application."""

from rollcall.services.ocr import DocumentExtractionError, OCRService
from rollcall.services.pdf_text import PDFTextService
from rollcall.services.upload_storage import (
    FileTooLargeError,
    UnsupportedFileError,
    UploadStorageService,
)

__all__ = [
    "DocumentExtractionError",
    "FileTooLargeError",
    "OCRService",
    "PDFTextService",
    "UnsupportedFileError",
    "UploadStorageService",
]
