"""
Database Package
================
Provides database connection, ORM models, and CRUD operations.

Quick Start:
    from database import (
        # Connection
        get_async_session, async_create_all_tables,

        # Models
        Report,

        # Enums
        SourceType, ReportStatus,

        # CRUD
        report_crud, SqlReportStore
    )

FastAPI Dependency:
    from database import get_async_session

    @router.get("/reports")
    async def list_reports(db: AsyncSession = Depends(get_async_session)):
        return await report_crud.get_multi(db)
"""

# Connection & Session Management
from database.connection import (
    Base,
    get_async_session,
    async_create_all_tables,
    async_drop_all_tables,
    check_database_connection,
    async_dispose_engines,
    async_engine,
    create_engine_for,
)

# ORM Models & Enums
from database.models import (
    Report,
    SourceType,
    ReportStatus,
)

# CRUD Operations
from database.crud import (
    report_crud,
    ReportStore,
    SqlReportStore,
)

__all__ = [
    # Connection
    "Base",
    "get_async_session",
    "async_create_all_tables",
    "async_drop_all_tables",
    "check_database_connection",
    "async_dispose_engines",
    "async_engine",
    "create_engine_for",

    # Models
    "Report",

    # Enums
    "SourceType",
    "ReportStatus",

    # CRUD
    "report_crud",
    "ReportStore",
    "SqlReportStore",
]
