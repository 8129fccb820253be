"""
Summarization Invoker
=====================
Failure containment around the summarization capability.

Whatever the capability does (raise, time out on its own, return nothing),
invoke() returns a SummaryResult and never raises. `success=False` is the
"summarization unavailable" signal; the report lifecycle decides what it
means for the record.

Usage:
    invoker = SummarizationInvoker(gemini_summarizer)
    result = await invoker.invoke(text)
    if result.success:
        print(result.summary_text)
"""

from dataclasses import dataclass
from typing import Optional, Protocol
import logging
import time

logger = logging.getLogger(__name__)


class Summarizer(Protocol):
    """Anything that turns text into a summary, raising on failure."""

    async def summarize(self, text: str) -> str: ...


@dataclass
class SummaryResult:
    """Outcome of one summarization attempt."""
    success: bool
    summary_text: Optional[str] = None
    error: Optional[str] = None
    processing_time_ms: int = 0


class SummarizationInvoker:
    """Calls the summarizer and converts every failure into a SummaryResult."""

    def __init__(self, summarizer: Summarizer):
        self.summarizer = summarizer

    async def invoke(self, text: str) -> SummaryResult:
        start_time = time.time()
        try:
            summary = await self.summarizer.summarize(text)
        except Exception as e:
            elapsed = int((time.time() - start_time) * 1000)
            logger.warning(f"Summarization unavailable after {elapsed}ms: {e}")
            return SummaryResult(success=False, error=str(e) or type(e).__name__, processing_time_ms=elapsed)

        elapsed = int((time.time() - start_time) * 1000)
        summary = (summary or "").strip()
        if not summary:
            logger.warning("Summarization returned an empty summary")
            return SummaryResult(success=False, error="Empty summary", processing_time_ms=elapsed)

        logger.info(f"Summary generated in {elapsed}ms ({len(summary)} chars)")
        return SummaryResult(success=True, summary_text=summary, processing_time_ms=elapsed)
