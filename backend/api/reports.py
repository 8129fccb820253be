"""
Reports API Router
==================
Handles report intake (text, image, PDF), listing and retrieval.

Endpoints:
    POST   /reports        - Create from JSON text or multipart image (auth)
    POST   /reports/pdf    - Create from an uploaded PDF, any field name (auth)
    GET    /reports        - List reports, newest first (paginated)
    GET    /reports/{id}   - Get one report

Integration:
    - IntakeRouter picks the extractor and hands off to ReportLifecycle
    - Summarization failures never fail intake: the report comes back pending
    - Extraction failures abort before anything is stored
"""

from fastapi import APIRouter, Depends, Request, Query, status
from starlette.datastructures import UploadFile
from pydantic import ValidationError as SchemaValidationError
from typing import Any, Dict, Optional
import logging

from api.dependencies import get_intake_router, get_lifecycle, parse_report_id
from config import settings
from exceptions import ValidationError
from schemas.report import (
    CreateReportRequest,
    ReportEnvelope,
    PdfReportEnvelope,
    ReportListResponse,
)
from services.extractors import TextSubmission, ImageSubmission, PdfSubmission
from services.intake import IntakeRouter
from services.report_service import ReportLifecycle
from utils.auth import Principal, require_principal

# Logger
logger = logging.getLogger(__name__)

# =============================================================================
# ROUTER INSTANCE
# =============================================================================

router = APIRouter()

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


# =============================================================================
# HELPERS
# =============================================================================

async def read_upload(upload: UploadFile) -> bytes:
    """Read an uploaded file, enforcing MAX_UPLOAD_SIZE_MB."""
    content = await upload.read()
    if len(content) > settings.max_upload_bytes:
        size_mb = len(content) / (1024 * 1024)
        raise ValidationError(
            f"File too large ({size_mb:.1f}MB). Maximum: {settings.MAX_UPLOAD_SIZE_MB}MB"
        )
    return content


def is_pdf_like(upload: UploadFile) -> bool:
    mime = (upload.content_type or "").lower()
    name = (upload.filename or "").lower()
    return mime in ("application/pdf", "application/x-pdf") or name.endswith(".pdf")


def parse_create_request(fields: Dict[str, Any]) -> CreateReportRequest:
    try:
        return CreateReportRequest.model_validate(fields)
    except SchemaValidationError:
        raise ValidationError("Invalid input") from None


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "",
    response_model=ReportListResponse,
    response_model_exclude_none=True,
    summary="List reports",
    description="Paginated list of reports, newest first. `limit` is clamped to 1-50."
)
async def list_reports(
    page: Optional[int] = Query(None, description="Page number (>= 1)"),
    limit: Optional[int] = Query(None, description="Items per page (1-50, default 10)"),
    lifecycle: ReportLifecycle = Depends(get_lifecycle)
):
    items, total, page, limit = await lifecycle.list(page, limit)
    return {"items": items, "total": total, "page": page, "limit": limit}


@router.get(
    "/{report_id}",
    response_model=ReportEnvelope,
    response_model_exclude_none=True,
    summary="Get a report",
    responses={
        400: {"description": "Invalid report id"},
        404: {"description": "Report not found"}
    }
)
async def get_report(
    report_id: str,
    lifecycle: ReportLifecycle = Depends(get_lifecycle)
):
    logger.info(f"Fetch report by id: {report_id}")
    report = await lifecycle.get(parse_report_id(report_id))
    return {"report": report}


@router.post(
    "",
    response_model=ReportEnvelope,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create a report from text or an image",
    description="""
    Accepts either JSON `{"sourceType": "text", "text": "..."}` or multipart
    form data with `sourceType` and an `image` file (or a `text` field).

    The report is created even when summarization is unavailable; it is then
    returned with `status: "pending"` and no `summaryText`.

    **Supported images:** PNG, JPEG, JPG, WEBP, TIFF, BMP
    """,
    responses={
        400: {"description": "Invalid input or unsupported image type"},
        401: {"description": "Missing or invalid credentials"}
    }
)
async def create_report(
    request: Request,
    principal: Principal = Depends(require_principal),
    intake: IntakeRouter = Depends(get_intake_router)
):
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(FORM_CONTENT_TYPES):
        async with request.form() as form:
            parsed = parse_create_request({
                "sourceType": form.get("sourceType"),
                "text": form.get("text") if isinstance(form.get("text"), str) else None,
            })

            if parsed.source_type == "image":
                upload = form.get("image")
                if not isinstance(upload, UploadFile):
                    raise ValidationError("Image file required")
                submission = ImageSubmission(
                    data=await read_upload(upload),
                    media_type=upload.content_type or "",
                    filename=upload.filename
                )
            else:
                submission = TextSubmission(text=parsed.text or "")

            report = await intake.submit(submission, owner_id=principal.id)
    else:
        try:
            body = await request.json()
        except ValueError:
            raise ValidationError("Invalid input") from None
        if not isinstance(body, dict):
            raise ValidationError("Invalid input")

        parsed = parse_create_request({"sourceType": body.get("sourceType"), "text": body.get("text")})
        if parsed.source_type == "image":
            raise ValidationError("Image file required")

        report = await intake.submit(TextSubmission(text=parsed.text or ""), owner_id=principal.id)

    return {"report": report}


@router.post(
    "/pdf",
    response_model=PdfReportEnvelope,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create a report from a PDF",
    description="""
    Multipart upload with the PDF under any field name. The first PDF-like
    file is used (by MIME type or `.pdf` suffix), else the first file.

    Only the embedded text layer is read; scanned PDFs without one are rejected.
    """,
    responses={
        400: {"description": "Missing, empty, non-PDF, unreadable or text-less file"},
        401: {"description": "Missing or invalid credentials"}
    }
)
async def create_pdf_report(
    request: Request,
    principal: Principal = Depends(require_principal),
    intake: IntakeRouter = Depends(get_intake_router)
):
    logger.info("Received PDF upload request")

    content_type = request.headers.get("content-type", "")
    if not content_type.startswith("multipart/form-data"):
        raise ValidationError("PDF file is required")

    async with request.form() as form:
        files = [value for _, value in form.multi_items() if isinstance(value, UploadFile)]
        upload = next((f for f in files if is_pdf_like(f)), files[0] if files else None)
        if upload is None:
            raise ValidationError("PDF file is required")

        async def reload() -> bytes:
            await upload.seek(0)
            return await upload.read()

        submission = PdfSubmission(
            data=await read_upload(upload),
            media_type=upload.content_type or "",
            filename=upload.filename or "",
            reload=reload
        )
        report = await intake.submit(submission, owner_id=principal.id)

    return {"success": True, "report": report}
