"""
Tests for the intake router: modality dispatch and extract-before-store.
"""

import pytest

from conftest import FakeStore, StubOCR, StubSummarizer
from database.models import ReportStatus, SourceType
from exceptions import UnsupportedMediaType, ValidationError
from services.extractors import (
    ImageOCRExtractor,
    ImageSubmission,
    PdfSubmission,
    PdfTextExtractor,
    TextPassthrough,
    TextSubmission,
)
from services.intake import IntakeRouter
from services.report_service import ReportLifecycle
from services.summarization import SummarizationInvoker


class FixedParser:

    def page_fragments(self, data: bytes):
        return [["Vitals", "normal."]]


@pytest.fixture
def intake(store: FakeStore, summarizer: StubSummarizer, ocr: StubOCR) -> IntakeRouter:
    return IntakeRouter(
        lifecycle=ReportLifecycle(store, SummarizationInvoker(summarizer)),
        text_extractor=TextPassthrough(),
        image_extractor=ImageOCRExtractor(ocr, fallback_enabled=True),
        pdf_extractor=PdfTextExtractor(FixedParser(), backoff_seconds=0),
    )


class TestIntakeRouter:

    async def test_text_submission(self, intake, store):
        report = await intake.submit(TextSubmission(text="  BP 120/80  "), owner_id="u1")

        assert report.source_type == SourceType.TEXT
        assert report.original_text == "BP 120/80"
        assert report.owner_id == "u1"
        assert store.creates == 1

    async def test_image_submission(self, intake, ocr):
        report = await intake.submit(ImageSubmission(data=b"png", media_type="image/png"))

        assert report.source_type == SourceType.IMAGE
        assert report.original_text == "BP 120/80"
        assert ocr.calls == [b"png"]

    async def test_pdf_submission(self, intake):
        report = await intake.submit(PdfSubmission(data=b"%PDF", media_type="application/pdf"))

        assert report.source_type == SourceType.PDF
        assert report.original_text == "Vitals normal."
        assert report.summary_text == "Normal vitals."
        assert report.status == ReportStatus.COMPLETED

    async def test_extraction_failure_stores_nothing(self, intake, store, summarizer):
        with pytest.raises(UnsupportedMediaType):
            await intake.submit(ImageSubmission(data=b"gif", media_type="image/gif"))

        assert store.creates == 0
        assert summarizer.calls == []

    async def test_unknown_submission_rejected(self, intake, store):
        with pytest.raises(ValidationError):
            await intake.submit("raw string")
        assert store.creates == 0
