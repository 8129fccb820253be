"""
Report Service - Lifecycle & Retry
==================================
Owns the Report status state machine and every decision about what
gets written to the store.

States:
    pending    text stored, no up-to-date summary
    completed  summary reflects the stored text

Transitions:
    create  -> completed   summarization succeeded
    create  -> pending     summarization unavailable (request still succeeds)
    retry   -> pending     persisted before the attempt (refresh in progress)
    pending -> completed   retry succeeded
    pending stays          retry failed; error surfaces to the caller

There is no terminal state: completed -> pending -> completed is the
normal path for repeated retries.

Usage:
    lifecycle = ReportLifecycle(SqlReportStore(db), SummarizationInvoker(summarizer))
    report = await lifecycle.create(text, SourceType.TEXT, owner_id)
    report = await lifecycle.retry(report.id)
"""

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
import logging

from database.crud import ReportStore
from database.models import Report, ReportStatus, SourceType
from exceptions import (
    NoTextAvailable,
    NotFound,
    SummaryGenerationFailed,
    ValidationError,
)
from services.summarization import SummarizationInvoker

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


def clamp_pagination(page: Optional[int], limit: Optional[int]) -> Tuple[int, int]:
    """Clamp page to >= 1 and limit to 1..50, matching the list endpoint."""
    page = max(1, 1 if page is None else page)
    limit = min(MAX_PAGE_SIZE, max(1, DEFAULT_PAGE_SIZE if limit is None else limit))
    return page, limit


class ReportLifecycle:
    """Creates reports from extracted text and re-runs their summaries."""

    def __init__(self, store: ReportStore, invoker: SummarizationInvoker):
        self.store = store
        self.invoker = invoker

    # =========================================================================
    # COMMANDS
    # =========================================================================

    async def create(
        self,
        extracted_text: str,
        source_type: SourceType,
        owner_id: Optional[str] = None
    ) -> Report:
        """
        Persist a new report for successfully extracted text.

        Summarization failure is not an error here: the report is stored
        as pending and a later retry can fill in the summary.
        """
        if not extracted_text or not extracted_text.strip():
            raise ValidationError("Text is required")

        result = await self.invoker.invoke(extracted_text)
        if result.success:
            status, summary_text = ReportStatus.COMPLETED, result.summary_text
        else:
            logger.warning(f"Creating {source_type.value} report without summary: {result.error}")
            status, summary_text = ReportStatus.PENDING, None

        report = await self.store.create(
            owner_id=owner_id,
            source_type=source_type,
            original_text=extracted_text,
            summary_text=summary_text,
            status=status,
        )
        logger.info(f"Report created: {report.id} ({source_type.value}, {status.value})")
        return report

    async def retry(self, report_id: UUID) -> Report:
        """
        Re-run summarization for a stored report.

        The pending mark is written before the attempt. On failure the
        record stays pending; the previous summary text is left in place
        but is no longer current.
        """
        report = await self.store.get(report_id)
        if report is None:
            raise NotFound("Report not found")
        if not report.original_text:
            raise NoTextAvailable("No text available to summarize")

        report = await self.store.update(report, status=ReportStatus.PENDING)

        result = await self.invoker.invoke(report.original_text)
        if not result.success:
            logger.error(f"Summary retry failed for report {report_id}: {result.error}")
            raise SummaryGenerationFailed("Failed to generate summary")

        report = await self.store.update(
            report,
            summary_text=result.summary_text,
            status=ReportStatus.COMPLETED,
        )
        logger.info(f"Report {report_id} summary refreshed")
        return report

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def get(self, report_id: UUID) -> Report:
        report = await self.store.get(report_id)
        if report is None:
            raise NotFound("Not found")
        return report

    async def list(self, page: Optional[int] = None, limit: Optional[int] = None) -> Tuple[List[Report], int, int, int]:
        """Newest first. Returns (items, total, page, limit) after clamping."""
        page, limit = clamp_pagination(page, limit)
        items = await self.store.list(skip=(page - 1) * limit, limit=limit)
        total = await self.store.count()
        return items, total, page, limit

    async def get_summary(self, report_id: UUID) -> Dict[str, Any]:
        report = await self.store.get(report_id)
        if report is None:
            raise NotFound("Report not found")
        return {
            "summaryText": report.summary_text or None,
            "status": report.status,
            "reportId": report.id,
        }
