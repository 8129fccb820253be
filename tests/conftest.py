"""
Pytest Configuration and Fixtures

The application reads its settings at import time, so the environment is
pinned here before any backend module is imported: an in-memory SQLite
database, no Gemini key and a known token secret.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4
from datetime import datetime, timezone

import pytest

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["GEMINI_API_KEY"] = ""
os.environ["JWT_ACCESS_SECRET"] = "test-secret"
os.environ["AUTO_CREATE_TABLES"] = "true"
os.environ["OCR_FALLBACK_ENABLED"] = "true"
os.environ["PDF_READ_BACKOFF_MS"] = "1"

# Add backend to path
BACKEND_ROOT = Path(__file__).parent.parent / "backend"
sys.path.insert(0, str(BACKEND_ROOT))

from jose import jwt  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from config import settings  # noqa: E402
from database.models import Report  # noqa: E402
from services.ocr_service import OCROutput, get_ocr_service  # noqa: E402
from services.gemini_service import get_summarizer  # noqa: E402


# =============================================================================
# CAPABILITY STUBS
# =============================================================================

class StubSummarizer:
    """Summarizer double: returns a fixed summary or raises when `fail` is set."""

    def __init__(self, summary: str = "Normal vitals.", fail: bool = False):
        self.summary = summary
        self.fail = fail
        self.calls: List[str] = []

    async def summarize(self, text: str) -> str:
        self.calls.append(text)
        if self.fail:
            raise RuntimeError("model unavailable")
        return self.summary


class StubOCR:
    """OCR double recording every call."""

    def __init__(self, text: str = "BP 120/80", success: bool = True):
        self.text = text
        self.success = success
        self.calls: List[bytes] = []

    async def process_image(self, image_bytes: bytes) -> OCROutput:
        self.calls.append(image_bytes)
        if not self.success:
            return OCROutput(success=False, error="tesseract is not installed")
        return OCROutput(text=self.text, success=True)


class FakeStore:
    """In-memory ReportStore; keeps insertion order and counts writes."""

    def __init__(self):
        self.reports: Dict[UUID, Report] = {}
        self.creates = 0
        self.updates: List[Dict[str, Any]] = []

    async def create(self, **data: Any) -> Report:
        self.creates += 1
        now = datetime.now(timezone.utc)
        report = Report(id=uuid4(), version=1, created_at=now, updated_at=now, **data)
        self.reports[report.id] = report
        return report

    async def get(self, report_id: UUID) -> Optional[Report]:
        return self.reports.get(report_id)

    async def update(self, report: Report, **changes: Any) -> Report:
        self.updates.append(dict(changes))
        for key, value in changes.items():
            setattr(report, key, value)
        report.version += 1
        return report

    async def list(self, skip: int, limit: int) -> List[Report]:
        newest_first = list(reversed(list(self.reports.values())))
        return newest_first[skip:skip + limit]

    async def count(self) -> int:
        return len(self.reports)


# =============================================================================
# FIXTURES
# =============================================================================

def make_token(principal_id: str = "clinician-1", secret: Optional[str] = None, **claims: Any) -> str:
    payload = {"id": principal_id, **claims}
    return jwt.encode(payload, secret or settings.JWT_ACCESS_SECRET, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def summarizer() -> StubSummarizer:
    return StubSummarizer()


@pytest.fixture
def ocr() -> StubOCR:
    return StubOCR()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def client(summarizer: StubSummarizer, ocr: StubOCR):
    """
    TestClient with stubbed summarizer and OCR.

    Entering the client runs the lifespan, which creates the tables in a
    fresh in-memory database; leaving it disposes the engine.
    """
    from main import app

    app.dependency_overrides[get_summarizer] = lambda: summarizer
    app.dependency_overrides[get_ocr_service] = lambda: ocr
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def pdf_bytes():
    """Build a one-page PDF whose text layer reads `text`."""
    import io
    from reportlab.pdfgen import canvas

    def build(text: str = "Vitals normal.") -> bytes:
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer)
        if text:
            pdf.drawString(72, 720, text)
        pdf.showPage()
        pdf.save()
        return buffer.getvalue()

    return build

