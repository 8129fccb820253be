"""
Summaries API Router
====================
Read and regenerate report summaries.

Endpoints:
    GET    /summaries               - Usage info
    GET    /summaries/{report_id}   - Current summary and status
    POST   /summaries/{report_id}   - Re-run summarization (retry)

A failed retry answers 500 and leaves the report pending; a retry that
lost a race with another writer answers 409.
"""

from fastapi import APIRouter, Depends
from typing import Optional
import logging

from api.dependencies import get_lifecycle, parse_report_id
from schemas.report import ReportEnvelope, SummaryResponse, SummaryUsageResponse
from services.report_service import ReportLifecycle
from utils.auth import Principal, resolve_principal

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=SummaryUsageResponse, summary="Summaries usage")
async def summaries_info():
    return {
        "ok": True,
        "usage": {
            "generate": "POST /summaries/{reportId}",
            "fetch": "GET /summaries/{reportId}",
        }
    }


@router.get(
    "/{report_id}",
    response_model=SummaryResponse,
    summary="Get a report's summary",
    responses={
        400: {"description": "Invalid report id"},
        404: {"description": "Report not found"}
    }
)
async def get_summary(
    report_id: str,
    lifecycle: ReportLifecycle = Depends(get_lifecycle)
):
    return await lifecycle.get_summary(parse_report_id(report_id))


@router.post(
    "/{report_id}",
    response_model=ReportEnvelope,
    response_model_exclude_none=True,
    summary="Regenerate a report's summary",
    responses={
        400: {"description": "Invalid report id or no text to summarize"},
        404: {"description": "Report not found"},
        409: {"description": "Report modified concurrently"},
        500: {"description": "Summarization failed; report left pending"}
    }
)
async def retry_summary(
    report_id: str,
    principal: Optional[Principal] = Depends(resolve_principal),
    lifecycle: ReportLifecycle = Depends(get_lifecycle)
):
    report_uuid = parse_report_id(report_id)
    logger.info(f"Summary retry for {report_uuid} requested by {principal.id if principal else 'anonymous'}")
    report = await lifecycle.retry(report_uuid)
    return {"report": report}
