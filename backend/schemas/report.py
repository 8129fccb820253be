"""
Report Schemas (Pydantic Models)
================================
Request/Response models for the report and summary endpoints.

Design Principles:
    - camelCase on the wire, snake_case in Python (alias generator)
    - Built straight from ORM rows (from_attributes)
    - Absent values are left out of responses (routes use exclude_none)
"""

from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, List, Literal, Dict
from datetime import datetime
from uuid import UUID

from database.models import SourceType, ReportStatus


# =============================================================================
# BASE SCHEMAS
# =============================================================================

class CamelModel(BaseModel):
    """Base for wire models: camelCase aliases, ORM input"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# REQUEST SCHEMAS (Client → Server)
# =============================================================================

class CreateReportRequest(CamelModel):
    """
    Body of POST /reports, sent as JSON or as multipart form fields.
    PDFs have their own endpoint (POST /reports/pdf).
    """

    source_type: Literal["text", "image"] = Field(..., description="Submission modality")
    text: Optional[str] = Field(None, description="Clinical text (sourceType=text)")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "sourceType": "text",
                "text": "Patient stable. BP 120/80, HR 72. Continue current medication."
            }
        }
    )


# =============================================================================
# RESPONSE SCHEMAS (Server → Client)
# =============================================================================

class ReportResponse(CamelModel):
    """A stored report"""

    id: UUID = Field(..., description="Unique report ID")
    owner_id: Optional[str] = Field(None, description="Submitting principal")
    source_type: SourceType = Field(..., description="Modality, fixed at creation")
    original_text: str = Field(..., description="Normalized extracted text")
    summary_text: Optional[str] = Field(None, description="Latest summary, when one exists")
    status: ReportStatus = Field(..., description="pending or completed")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "ownerId": "user-42",
                "sourceType": "pdf",
                "originalText": "Vitals normal.",
                "summaryText": "Normal vitals.",
                "status": "completed",
                "createdAt": "2024-01-15T10:30:00Z",
                "updatedAt": "2024-01-15T10:30:02Z"
            }
        }
    )


class ReportEnvelope(CamelModel):
    """{report} wrapper used by single-report responses"""

    report: ReportResponse


class PdfReportEnvelope(CamelModel):
    """{success, report} wrapper returned by the PDF upload"""

    success: bool = True
    report: ReportResponse


class ReportListResponse(CamelModel):
    """Paginated list of reports, newest first"""

    items: List[ReportResponse] = Field(..., description="Reports on this page")
    total: int = Field(..., description="Total count (all pages)")
    page: int = Field(..., description="Current page number")
    limit: int = Field(..., description="Items per page (1-50)")


class SummaryResponse(CamelModel):
    """Summary view of one report"""

    summary_text: Optional[str] = Field(None, description="Latest summary or null")
    status: ReportStatus
    report_id: UUID


class SummaryUsageResponse(BaseModel):
    ok: bool = True
    usage: Dict[str, str]
