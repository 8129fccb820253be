"""
Database Connection Module
==========================
One async engine per process, built from settings.async_database_url
(asyncpg for PostgreSQL, aiosqlite for SQLite).

Usage:
    @router.get("/reports")
    async def list_reports(db: AsyncSession = Depends(get_async_session)):
        ...

    await async_create_all_tables()      # startup
    await async_dispose_engines()        # shutdown
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from typing import AsyncGenerator, Dict, Any, Optional
import logging

from config import settings

# Configure logging
logger = logging.getLogger(__name__)

# Base class for all ORM models
Base = declarative_base()


def _engine_options(url: str) -> Dict[str, Any]:
    """Pool options per backend; in-memory SQLite shares one connection."""
    if url.startswith("sqlite"):
        if ":memory:" in url:
            return {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        return {}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_pre_ping": True,  # Verify connections before use
        "pool_recycle": 3600,   # Recycle connections after 1 hour
    }


def create_engine_for(url: str) -> AsyncEngine:
    """Build an async engine for the given URL."""
    return create_async_engine(
        url,
        echo=False,
        **_engine_options(url),
    )


# =============================================================================
# ASYNCHRONOUS ENGINE & SESSION (For FastAPI async endpoints)
# =============================================================================

async_engine = create_engine_for(settings.async_database_url)

AsyncSessionLocal = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for async database sessions.

    Usage in FastAPI:
        @router.get("/reports")
        async def list_reports(db: AsyncSession = Depends(get_async_session)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# =============================================================================
# DATABASE LIFECYCLE FUNCTIONS
# =============================================================================

async def async_create_all_tables(engine: Optional[AsyncEngine] = None):
    """
    Create all tables defined in models.
    Use for initial setup or testing.
    """
    from database.models import Report  # noqa: F401  (registers the table)
    async with (engine or async_engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("All database tables created successfully")


async def async_drop_all_tables(engine: Optional[AsyncEngine] = None):
    """
    Drop all tables. USE WITH CAUTION!
    """
    from database.models import Report  # noqa: F401
    async with (engine or async_engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.warning("All database tables dropped!")


async def check_database_connection() -> bool:
    """
    Verify database connectivity.
    Returns True if connection successful.
    """
    try:
        async with async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


async def async_dispose_engines():
    """
    Dispose of engine connections.
    Call during application shutdown.
    """
    await async_engine.dispose()
    logger.info("Async engine disposed")
