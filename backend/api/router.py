"""
Central API Router
==================
Combines all sub-routers into a single API router.

Usage in main.py:
    from api.router import api_router
    app.include_router(api_router, prefix=settings.API_PREFIX)

Router Structure:
    /
    ├── /reports     - Report intake, listing & retrieval
    └── /summaries   - Summary lookup & regeneration
"""

from fastapi import APIRouter

from api.reports import router as reports_router
from api.summaries import router as summaries_router

# =============================================================================
# MAIN API ROUTER
# =============================================================================

api_router = APIRouter()

# -----------------------------------------------------------------------------
# Reports Router
# Endpoints:
#   POST   /reports          - Create from text or image
#   POST   /reports/pdf      - Create from PDF
#   GET    /reports          - List reports
#   GET    /reports/{id}     - Get report
# -----------------------------------------------------------------------------
api_router.include_router(
    reports_router,
    prefix="/reports",
    tags=["Reports"],
    responses={
        404: {"description": "Report not found"},
        400: {"description": "Invalid input, media type or document"}
    }
)

# -----------------------------------------------------------------------------
# Summaries Router
# Endpoints:
#   GET    /summaries/{id}   - Get summary
#   POST   /summaries/{id}   - Regenerate summary
# -----------------------------------------------------------------------------
api_router.include_router(
    summaries_router,
    prefix="/summaries",
    tags=["Summaries"],
    responses={
        404: {"description": "Report not found"}
    }
)
