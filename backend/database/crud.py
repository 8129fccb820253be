"""
Database CRUD Operations
========================
Create, Read, Update operations for the Report model, plus the
ReportStore used by the report lifecycle.

Usage:
    from database.crud import report_crud, SqlReportStore

    # Async (FastAPI)
    report = await report_crud.create(db, **data)

    # Store bound to one session
    store = SqlReportStore(db)
    report = await store.get(report_id)
"""

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError
from typing import List, Optional, TypeVar, Generic, Type, Protocol, Any
from uuid import UUID
import logging

from database.models import Report
from exceptions import ConcurrentUpdate

logger = logging.getLogger(__name__)

# Type variable for generic CRUD
ModelType = TypeVar("ModelType")


# =============================================================================
# BASE CRUD CLASS
# =============================================================================

class BaseCRUD(Generic[ModelType]):
    """
    Base class with common CRUD operations.
    Inherit for model-specific operations.
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, id: UUID) -> Optional[ModelType]:
        """Get single record by ID"""
        result = await db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def get_multi(
        self,
        db: AsyncSession,
        skip: int = 0,
        limit: int = 100,
        order_by: str = "created_at",
        descending: bool = True
    ) -> List[ModelType]:
        """Get multiple records with pagination"""
        order_col = getattr(self.model, order_by, self.model.created_at)
        order = order_col.desc() if descending else order_col.asc()

        result = await db.execute(
            select(self.model).order_by(order).offset(skip).limit(limit)
        )
        return list(result.scalars().all())

    async def create(self, db: AsyncSession, **data) -> ModelType:
        """Create new record"""
        obj = self.model(**data)
        db.add(obj)
        await db.flush()
        await db.refresh(obj)
        return obj

    async def update(self, db: AsyncSession, obj: ModelType, **data) -> ModelType:
        """Apply changes to a loaded record and flush them"""
        for key, value in data.items():
            if hasattr(obj, key):
                setattr(obj, key, value)
        await db.flush()
        await db.refresh(obj)
        return obj

    async def count(self, db: AsyncSession) -> int:
        """Count total records"""
        result = await db.execute(
            select(func.count()).select_from(self.model)
        )
        return result.scalar() or 0


# =============================================================================
# REPORT CRUD
# =============================================================================

class ReportCRUD(BaseCRUD[Report]):
    """CRUD operations for Report model"""

    def __init__(self):
        super().__init__(Report)


report_crud = ReportCRUD()


# =============================================================================
# REPORT STORE
# =============================================================================

class ReportStore(Protocol):
    """Keyed record store the report lifecycle writes through."""

    async def create(self, **data: Any) -> Report: ...

    async def get(self, report_id: UUID) -> Optional[Report]: ...

    async def update(self, report: Report, **changes: Any) -> Report: ...

    async def list(self, skip: int, limit: int) -> List[Report]: ...

    async def count(self) -> int: ...


class SqlReportStore:
    """
    ReportStore over one AsyncSession.

    Writes are committed immediately so a `pending` mark is visible to
    other requests while summarization is still running. A version
    mismatch on update is reported as ConcurrentUpdate.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, **data: Any) -> Report:
        report = await report_crud.create(self.db, **data)
        await self.db.commit()
        return report

    async def get(self, report_id: UUID) -> Optional[Report]:
        return await report_crud.get(self.db, report_id)

    async def update(self, report: Report, **changes: Any) -> Report:
        report_id = report.id
        try:
            report = await report_crud.update(self.db, report, **changes)
            await self.db.commit()
        except StaleDataError as e:
            await self.db.rollback()
            logger.warning(f"Stale write rejected for report {report_id}: {e}")
            raise ConcurrentUpdate() from e
        return report

    async def list(self, skip: int, limit: int) -> List[Report]:
        return await report_crud.get_multi(self.db, skip=skip, limit=limit)

    async def count(self) -> int:
        return await report_crud.count(self.db)
