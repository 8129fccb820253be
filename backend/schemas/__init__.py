"""
Schemas Package
===============
Pydantic models for API request/response validation.

Usage:
    from schemas import (
        CreateReportRequest,
        ReportResponse, ReportEnvelope, ReportListResponse,
        SummaryResponse
    )
"""

from schemas.report import (
    # Base
    CamelModel,

    # Request
    CreateReportRequest,

    # Response
    ReportResponse,
    ReportEnvelope,
    PdfReportEnvelope,
    ReportListResponse,
    SummaryResponse,
    SummaryUsageResponse,
)

__all__ = [
    "CamelModel",
    "CreateReportRequest",
    "ReportResponse",
    "ReportEnvelope",
    "PdfReportEnvelope",
    "ReportListResponse",
    "SummaryResponse",
    "SummaryUsageResponse",
]
