"""
Modality Extractors
===================
Turn a raw submission into normalized plain text, or fail with a typed
error. No extractor ever returns partial or empty text.

Submissions form a closed union: TextSubmission | ImageSubmission |
PdfSubmission. Each carries the payload shape of its modality.

Extractors:
    - TextPassthrough:    trims, rejects blank text
    - ImageOCRExtractor:  media-type allow-list, grayscale + Tesseract,
                          sentinel text when OCR infrastructure is down
    - PdfTextExtractor:   empty-buffer re-reads, PDF type check,
                          page-by-page text layer via an injected parser
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Union
import asyncio
import logging
import re

from config import settings
from database.models import SourceType
from exceptions import (
    ValidationError,
    UnsupportedMediaType,
    EmptyUpload,
    UnreadableDocument,
    NoTextFound,
    OcrUnavailable,
)
from services.ocr_service import OCRService
from services.pdf_service import PdfTextLayer

logger = logging.getLogger(__name__)


OCR_UNAVAILABLE_TEXT = "[OCR temporarily unavailable – try running locally]"

IMAGE_MEDIA_TYPE = re.compile(r"^(image/)?(png|jpeg|jpg|webp|tiff|bmp)$", re.IGNORECASE)
PDF_MEDIA_TYPES = {"application/pdf", "application/x-pdf"}


# =============================================================================
# SUBMISSIONS
# =============================================================================

@dataclass(frozen=True)
class TextSubmission:
    text: str

    source_type = SourceType.TEXT


@dataclass(frozen=True)
class ImageSubmission:
    data: bytes
    media_type: str
    filename: Optional[str] = None

    source_type = SourceType.IMAGE


@dataclass(frozen=True)
class PdfSubmission:
    """
    A PDF upload.

    `reload` re-reads the bytes from where the upload was spooled; it is
    used when `data` came back empty.
    """
    data: bytes
    media_type: str = ""
    filename: str = ""
    reload: Optional[Callable[[], Awaitable[bytes]]] = None

    source_type = SourceType.PDF


Submission = Union[TextSubmission, ImageSubmission, PdfSubmission]


# =============================================================================
# EXTRACTORS
# =============================================================================

class TextPassthrough:
    """Plain text submissions: trimmed, never blank."""

    async def extract(self, submission: TextSubmission) -> str:
        text = (submission.text or "").strip()
        if not text:
            raise ValidationError("Text is required")
        return text


class ImageOCRExtractor:
    """
    Scanned images through Tesseract.

    If the OCR engine cannot run and `fallback_enabled` is set, the
    request still succeeds with OCR_UNAVAILABLE_TEXT as its text. An
    engine that ran but read nothing is a NoTextFound, never the sentinel.
    """

    def __init__(self, ocr: OCRService, fallback_enabled: Optional[bool] = None):
        self.ocr = ocr
        self.fallback_enabled = (
            settings.OCR_FALLBACK_ENABLED if fallback_enabled is None else fallback_enabled
        )

    @staticmethod
    def is_supported(media_type: str) -> bool:
        return bool(IMAGE_MEDIA_TYPE.match((media_type or "").strip()))

    async def extract(self, submission: ImageSubmission) -> str:
        if not self.is_supported(submission.media_type):
            raise UnsupportedMediaType("Unsupported image type")

        result = await self.ocr.process_image(submission.data)

        if not result.success:
            if self.fallback_enabled:
                logger.warning(f"OCR failed or skipped due to environment limits: {result.error}")
                return OCR_UNAVAILABLE_TEXT
            raise OcrUnavailable()

        text = (result.text or "").strip()
        if not text:
            raise NoTextFound("Unable to extract text from image")

        logger.info(f"OCR extracted {len(text)} chars in {result.processing_time_ms}ms")
        return text


class PdfTextExtractor:
    """PDF uploads through the text layer."""

    def __init__(
        self,
        parser: PdfTextLayer,
        read_retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None
    ):
        self.parser = parser
        self.read_retries = settings.PDF_READ_RETRIES if read_retries is None else read_retries
        self.backoff_seconds = (
            settings.pdf_read_backoff_seconds if backoff_seconds is None else backoff_seconds
        )

    @staticmethod
    def is_pdf(media_type: str, filename: str) -> bool:
        return (
            (media_type or "").lower() in PDF_MEDIA_TYPES
            or (filename or "").lower().endswith(".pdf")
        )

    async def _ensure_bytes(self, submission: PdfSubmission) -> bytes:
        """Return the upload bytes, re-reading the spooled copy if they came back empty."""
        data = submission.data
        if data or submission.reload is None:
            return data

        for attempt in range(1, self.read_retries + 1):
            try:
                data = await submission.reload()
            except OSError as e:
                logger.debug(f"PDF re-read attempt {attempt} failed: {e}")
                data = b""
            if data:
                logger.info(f"PDF bytes recovered on re-read attempt {attempt}")
                return data
            await asyncio.sleep(self.backoff_seconds)

        return data

    @staticmethod
    def join_pages(pages: List[List[str]]) -> str:
        return "\n".join(" ".join(fragments) for fragments in pages).strip()

    async def extract(self, submission: PdfSubmission) -> str:
        data = await self._ensure_bytes(submission)
        if not data:
            logger.warning(f"Uploaded PDF appears empty (filename={submission.filename or 'n/a'})")
            raise EmptyUpload("Uploaded PDF is empty")

        if not self.is_pdf(submission.media_type, submission.filename):
            raise UnsupportedMediaType("Only PDF files are allowed")

        logger.info(f"Parsing PDF {submission.filename!r} ({submission.media_type}, {len(data)} bytes)")
        try:
            pages = await asyncio.to_thread(self.parser.page_fragments, data)
        except Exception as e:
            logger.error(f"PDF text extraction failed: {e}")
            raise UnreadableDocument("Unable to read PDF file") from e

        text = self.join_pages(pages)
        if not text:
            raise NoTextFound("No readable text found in PDF")
        return text
