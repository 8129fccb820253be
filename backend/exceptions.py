"""
Domain Exceptions
=================
Typed errors raised by extractors, the report lifecycle and auth.

Each error carries the HTTP status it maps to; main.py turns any
ReportError into a JSON response of the form {"detail": message}.
"""

from typing import Optional


class ReportError(Exception):
    """Base class for errors that surface to API clients."""

    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ===== 400 =====

class ValidationError(ReportError):
    status_code = 400
    default_message = "Invalid input"


class UnsupportedMediaType(ReportError):
    status_code = 400
    default_message = "Unsupported media type"


class EmptyUpload(ReportError):
    status_code = 400
    default_message = "Uploaded PDF is empty"


class UnreadableDocument(ReportError):
    status_code = 400
    default_message = "Unable to read PDF file"


class NoTextFound(ReportError):
    status_code = 400
    default_message = "No readable text found"


class NoTextAvailable(ReportError):
    status_code = 400
    default_message = "No text available to summarize"


# ===== 401 / 404 / 409 =====

class Unauthorized(ReportError):
    status_code = 401
    default_message = "Unauthorized"


class NotFound(ReportError):
    status_code = 404
    default_message = "Not found"


class ConcurrentUpdate(ReportError):
    status_code = 409
    default_message = "Report was modified concurrently, retry the request"


# ===== 5xx =====

class ServerError(ReportError):
    status_code = 500
    default_message = "Server error"


class SummaryGenerationFailed(ServerError):
    default_message = "Failed to generate summary"


class OcrUnavailable(ReportError):
    status_code = 503
    default_message = "OCR is temporarily unavailable"

