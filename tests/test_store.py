"""
Tests for the SQLAlchemy-backed report store, including version conflicts.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database import SqlReportStore, async_create_all_tables, create_engine_for
from database.models import ReportStatus, SourceType
from exceptions import ConcurrentUpdate


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'reports.db'}")
    await async_create_all_tables(engine)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


async def create_report(factory, text: str = "Vitals normal."):
    async with factory() as db:
        return await SqlReportStore(db).create(
            owner_id="u1",
            source_type=SourceType.TEXT,
            original_text=text,
            summary_text=None,
            status=ReportStatus.PENDING,
        )


class TestSqlReportStore:

    async def test_create_assigns_id_version_and_timestamps(self, session_factory):
        report = await create_report(session_factory)

        assert report.id is not None
        assert report.version == 1
        assert report.created_at is not None
        assert report.updated_at is not None

    async def test_update_bumps_version(self, session_factory):
        report = await create_report(session_factory)

        async with session_factory() as db:
            store = SqlReportStore(db)
            loaded = await store.get(report.id)
            updated = await store.update(loaded, summary_text="Normal vitals.", status=ReportStatus.COMPLETED)

        assert updated.version == 2
        assert updated.status == ReportStatus.COMPLETED

        async with session_factory() as db:
            reloaded = await SqlReportStore(db).get(report.id)
        assert reloaded.summary_text == "Normal vitals."
        assert reloaded.source_type == SourceType.TEXT

    async def test_stale_update_is_rejected(self, session_factory):
        report = await create_report(session_factory)

        async with session_factory() as first_db, session_factory() as second_db:
            first, second = SqlReportStore(first_db), SqlReportStore(second_db)
            first_copy = await first.get(report.id)
            second_copy = await second.get(report.id)

            await first.update(first_copy, status=ReportStatus.COMPLETED, summary_text="A")

            with pytest.raises(ConcurrentUpdate) as exc_info:
                await second.update(second_copy, status=ReportStatus.COMPLETED, summary_text="B")
            assert exc_info.value.status_code == 409

        async with session_factory() as db:
            reloaded = await SqlReportStore(db).get(report.id)
        assert reloaded.summary_text == "A"
        assert reloaded.version == 2

    async def test_list_and_count(self, session_factory):
        for i in range(3):
            await create_report(session_factory, f"note {i}")

        async with session_factory() as db:
            store = SqlReportStore(db)
            page = await store.list(skip=0, limit=2)
            total = await store.count()

        assert total == 3
        assert len(page) == 2
