"""
Intake Router
=============
Selects the extractor for a submission's modality and hands the text to
the report lifecycle. Holds no state of its own.
"""

from typing import Optional
import logging

from database.models import Report
from exceptions import ValidationError
from services.extractors import (
    Submission,
    TextSubmission,
    ImageSubmission,
    PdfSubmission,
    TextPassthrough,
    ImageOCRExtractor,
    PdfTextExtractor,
)
from services.report_service import ReportLifecycle

logger = logging.getLogger(__name__)


class IntakeRouter:

    def __init__(
        self,
        lifecycle: ReportLifecycle,
        text_extractor: TextPassthrough,
        image_extractor: ImageOCRExtractor,
        pdf_extractor: PdfTextExtractor
    ):
        self.lifecycle = lifecycle
        self.text_extractor = text_extractor
        self.image_extractor = image_extractor
        self.pdf_extractor = pdf_extractor

    async def extract(self, submission: Submission) -> str:
        if isinstance(submission, TextSubmission):
            return await self.text_extractor.extract(submission)
        if isinstance(submission, ImageSubmission):
            return await self.image_extractor.extract(submission)
        if isinstance(submission, PdfSubmission):
            return await self.pdf_extractor.extract(submission)
        raise ValidationError(f"Unsupported submission type: {type(submission).__name__}")

    async def submit(self, submission: Submission, owner_id: Optional[str] = None) -> Report:
        """Extract, then create. Extraction errors propagate before anything is stored."""
        text = await self.extract(submission)
        return await self.lifecycle.create(text, submission.source_type, owner_id)
