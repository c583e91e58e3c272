"""OCR service for extracting text from photographed or scanned member lists."""

import logging
from pathlib import Path

import pytesseract
from PIL import Image, UnidentifiedImageError

from rollcall.config import settings

logger = logging.getLogger(__name__)


class DocumentExtractionError(Exception):
    """Raised when text cannot be recovered from an uploaded document."""

    pass


class OCRService:
    """Service for extracting text from images using Tesseract OCR."""

    def __init__(self, lang: str | None = None, tesseract_cmd: str | None = None) -> None:
        """Initialize the OCR service.

        Args:
            lang: Tesseract language code. Defaults to config setting.
            tesseract_cmd: Path to the tesseract binary. Defaults to config setting.
        """
        self.lang = lang or settings.tesseract_lang
        cmd = tesseract_cmd or settings.tesseract_cmd
        if cmd:
            pytesseract.pytesseract.tesseract_cmd = cmd

    def extract_text(self, image_path: Path) -> str:
        """Extract text from an image file.

        Blocking; callers on the event loop should run it in a worker thread.

        Args:
            image_path: Path to the image file.

        Returns:
            Extracted text from the image.

        Raises:
            DocumentExtractionError: If the image cannot be read or OCR fails.
        """
        try:
            with Image.open(image_path) as image:
                # Grayscale improves recognition on photographed paper
                if image.mode != "L":
                    image = image.convert("L")

                text = pytesseract.image_to_string(
                    image,
                    lang=self.lang,
                    config="--psm 6",  # Assume uniform block of text
                )
        except pytesseract.TesseractNotFoundError as e:
            # Subclass of OSError, so it must be caught first
            raise DocumentExtractionError("Tesseract OCR engine is not installed") from e
        except pytesseract.TesseractError as e:
            raise DocumentExtractionError(f"OCR failed: {e}") from e
        except (UnidentifiedImageError, OSError) as e:
            raise DocumentExtractionError(f"Could not read image: {e}") from e

        logger.debug("OCR extracted %d characters from %s", len(text), image_path.name)
        return text.strip()
