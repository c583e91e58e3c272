"""Embedded text extraction for PDF member lists."""

import logging
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from rollcall.services.ocr import DocumentExtractionError

logger = logging.getLogger(__name__)


class PDFTextService:
    """Reads the text layer of a PDF. Scanned PDFs without one yield empty text."""

    def extract_text(self, pdf_path: Path) -> str:
        """Concatenate the embedded text of every page, one page per block.

        Raises:
            DocumentExtractionError: If the file is not a readable PDF.
        """
        try:
            reader = PdfReader(pdf_path)
            if reader.is_encrypted:
                raise DocumentExtractionError("PDF is password protected")
            pages = [page.extract_text() or "" for page in reader.pages]
        except PdfReadError as e:
            raise DocumentExtractionError(f"Could not read PDF: {e}") from e

        text = "\n".join(pages).replace("\u202f", " ").replace("\xa0", " ")
        logger.debug("Extracted %d characters from %d PDF pages", len(text), len(pages))
        return text
