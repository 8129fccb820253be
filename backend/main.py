"""
FastAPI Application Entry Point
===============================
Main application setup with CORS, routers, and lifecycle management.

Usage:
    uvicorn main:app --reload --port 5000
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
import asyncio
import logging
import time

from config import settings
from exceptions import ReportError

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.dialects").setLevel(logging.WARNING)


# =============================================================================
# APPLICATION LIFESPAN (Startup/Shutdown)
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup; release the Gemini client and DB pool on shutdown."""
    from database import async_create_all_tables, async_dispose_engines
    from services.gemini_service import gemini_summarizer

    # === STARTUP ===
    logger.info("=" * 50)
    logger.info(f"Starting {settings.APP_NAME}")
    logger.info(f"   Environment: {settings.APP_ENV}")
    logger.info(f"   Debug: {settings.DEBUG}")
    logger.info("=" * 50)

    if settings.AUTO_CREATE_TABLES:
        await async_create_all_tables()
        logger.info("✅ Database tables ready")

    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY not set: new reports will stay pending until retried")

    logger.info("✅ Application startup complete")
    logger.info(f"API Docs: http://localhost:{settings.BACKEND_PORT}/docs")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down application...")

    await gemini_summarizer.close()
    await async_dispose_engines()
    logger.info("✅ Database connections closed")

    logger.info("Application shutdown complete")


# =============================================================================
# OPENAPI TAGS DOCUMENTATION
# =============================================================================

tags_metadata = [
    {
        "name": "Health",
        "description": "Health check and system status endpoints.",
    },
    {
        "name": "Reports",
        "description": "Submit clinical text, images (PNG, JPEG, WEBP, TIFF, BMP) or PDFs; list and retrieve reports.",
    },
    {
        "name": "Summaries",
        "description": "Fetch a report's summary or regenerate it.",
    },
]


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.APP_NAME,
    description="""
    ## Clinical Report Summarizer API

    Turn clinical documents into short summaries.

    ### Features
    - **Submit** raw text, scanned images (Tesseract OCR) or PDFs (text layer)
    - **Summarize** with Google Gemini
    - **Retry** summaries that were deferred because the model was unavailable

    ### Workflow
    1. Submit a document (`POST /reports` or `POST /reports/pdf`)
    2. The text is extracted and stored; a summary is attempted right away
    3. If summarization was unavailable the report is `pending`
    4. `POST /summaries/{reportId}` re-runs summarization
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE
# =============================================================================

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Wall-clock handling time in seconds, as X-Process-Time"""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = f"{process_time:.4f}"
    return response


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(ReportError)
async def report_error_handler(request: Request, exc: ReportError):
    """Typed domain errors carry their own status code"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Query and path parameters that fail type coercion"""
    errors = [
        {"field": ".".join(str(loc) for loc in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Validation error",
            "errors": errors
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors"""
    logger.exception(f"Unhandled error: {exc}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "message": str(exc) if settings.DEBUG else "An unexpected error occurred"
        }
    )


# =============================================================================
# ROOT ENDPOINTS
# =============================================================================

@app.get("/", tags=["Health"])
async def root():
    """Service banner"""
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Component health: database round-trip, Gemini key presence and the
    tesseract binary. A missing Gemini key degrades the service (new
    reports stay pending) but does not make it unhealthy.
    """
    from database import check_database_connection
    from services.gemini_service import gemini_summarizer
    from services.ocr_service import ocr_service

    health = {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": "1.0.0",
        "environment": settings.APP_ENV,
        "checks": {}
    }

    # Database
    if await check_database_connection():
        health["checks"]["database"] = {"status": "ok"}
    else:
        health["checks"]["database"] = {"status": "error"}
        health["status"] = "degraded"

    # Gemini API configuration
    gemini = gemini_summarizer.get_status()
    health["checks"]["gemini"] = {
        "status": "ok" if gemini["api_key_configured"] else "warning",
        "configured": gemini["api_key_configured"],
        "model": gemini["model_name"]
    }
    if not gemini["api_key_configured"]:
        health["status"] = "degraded"

    # Tesseract
    # the version check shells out to tesseract
    ocr = await asyncio.to_thread(ocr_service.get_status)
    health["checks"]["ocr"] = {
        "status": "ok" if ocr["available"] else "warning",
        **ocr
    }

    return health


# =============================================================================
# INCLUDE ROUTERS
# =============================================================================

from api.router import api_router  # noqa: E402
app.include_router(api_router, prefix=settings.API_PREFIX)


# =============================================================================
# DEV ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.BACKEND_HOST,
        port=settings.BACKEND_PORT,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
