"""Extractor selection by source kind.

Every extractor exposes ``extract(path) -> ParseResult`` and is blocking;
the processor runs it in a worker thread.
"""

import logging
from pathlib import Path
from typing import Callable, Protocol

from rollcall.config import settings
from rollcall.models.import_session import SourceKind
from rollcall.models.records import ParseResult
from rollcall.services.ocr import OCRService
from rollcall.services.pdf_text import PDFTextService

from .heuristic import HeuristicTextExtractor
from .mapping import ColumnMapper
from .normalizers import FieldNormalizer
from .tabular import TabularExtractor

logger = logging.getLogger(__name__)


class RecordExtractor(Protocol):
    def extract(self, path: Path) -> ParseResult: ...


class DocumentTextExtractor:
    """Recovers text from a document, then parses it heuristically."""

    def __init__(
        self,
        text_source: Callable[[Path], str],
        heuristic: HeuristicTextExtractor,
        max_text_chars: int,
    ) -> None:
        self.text_source = text_source
        self.heuristic = heuristic
        self.max_text_chars = max_text_chars

    def extract(self, path: Path) -> ParseResult:
        text = self.text_source(path)
        if len(text) > self.max_text_chars:
            logger.warning(
                "Extracted text from %s truncated from %d to %d characters",
                path.name,
                len(text),
                self.max_text_chars,
            )
            text = text[: self.max_text_chars]
        return self.heuristic.extract_text(text)


def build_extractor(
    kind: SourceKind,
    ocr_service: OCRService | None = None,
    pdf_service: PDFTextService | None = None,
) -> RecordExtractor:
    """Create the extractor for a source kind.

    Args:
        kind: Source kind recorded on the import session at upload.
        ocr_service: OCR engine for image sources.
        pdf_service: Text layer reader for PDF sources.
    """
    mapper = ColumnMapper()
    normalizer = FieldNormalizer()
    max_rows = settings.import_max_rows

    if kind == SourceKind.TABULAR:
        return TabularExtractor(mapper, normalizer, max_rows=max_rows)

    heuristic = HeuristicTextExtractor(
        mapper,
        normalizer,
        header_scan_lines=settings.import_header_scan_lines,
        max_rows=max_rows,
    )
    if kind == SourceKind.PDF:
        pdf_source = pdf_service or PDFTextService()
        return DocumentTextExtractor(pdf_source.extract_text, heuristic, settings.import_max_text_chars)
    if kind == SourceKind.IMAGE:
        ocr_source = ocr_service or OCRService()
        return DocumentTextExtractor(ocr_source.extract_text, heuristic, settings.import_max_text_chars)

    raise ValueError(f"Unsupported source kind: {kind}")
