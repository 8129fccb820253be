"""
API Dependencies
================
Per-request wiring of the store, the lifecycle and the intake router.

Capabilities (OCR, PDF parser, summarizer) come from their own provider
functions so tests can swap them with app.dependency_overrides.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from database import get_async_session, SqlReportStore
from exceptions import ValidationError
from services.extractors import TextPassthrough, ImageOCRExtractor, PdfTextExtractor
from services.gemini_service import get_summarizer
from services.intake import IntakeRouter
from services.ocr_service import OCRService, get_ocr_service
from services.pdf_service import PdfTextLayer, get_pdf_text_layer
from services.report_service import ReportLifecycle
from services.summarization import SummarizationInvoker, Summarizer


def parse_report_id(report_id: str) -> UUID:
    """Path ids are validated by hand so a malformed id is a 400, not a 422."""
    try:
        return UUID(report_id)
    except (ValueError, TypeError, AttributeError):
        raise ValidationError("Invalid report id") from None


def get_report_store(db: AsyncSession = Depends(get_async_session)) -> SqlReportStore:
    return SqlReportStore(db)


def get_lifecycle(
    store: SqlReportStore = Depends(get_report_store),
    summarizer: Summarizer = Depends(get_summarizer)
) -> ReportLifecycle:
    return ReportLifecycle(store, SummarizationInvoker(summarizer))


def get_intake_router(
    lifecycle: ReportLifecycle = Depends(get_lifecycle),
    ocr: OCRService = Depends(get_ocr_service),
    pdf_parser: PdfTextLayer = Depends(get_pdf_text_layer)
) -> IntakeRouter:
    return IntakeRouter(
        lifecycle=lifecycle,
        text_extractor=TextPassthrough(),
        image_extractor=ImageOCRExtractor(ocr),
        pdf_extractor=PdfTextExtractor(pdf_parser),
    )
