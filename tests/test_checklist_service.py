"""체크리스트 서비스 동시성 테스트.

Checklist service concurrency tests — per-checklist lock bookkeeping and
two sessions racing to submit the same item against a file-backed SQLite
database.
"""

import asyncio
import uuid
from collections.abc import AsyncGenerator
from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.database import Base
from app.models.property import Property, PropertyRoom, Room, RoomTask, Task
from app.models.user import User
from app.services.checklist_service import ChecklistService, checklist_service
from app.services.geofence_guard import Coordinate, RequestLocationProvider
from app.utils.exceptions import ChecklistEngineError, NotFoundError
from tests.conftest import ANCHOR_LAT, ANCHOR_LNG

AT_PROPERTY = Coordinate(latitude=ANCHOR_LAT, longitude=ANCHOR_LNG)


class TestLockBookkeeping:
    """체크리스트별 잠금 정리."""

    async def test_unknown_ids_leave_no_locks(self, db, housekeeper_user):
        """없는 체크리스트 요청 후 잠금 맵이 비어 있음."""
        service = ChecklistService()

        for _ in range(20):
            with pytest.raises(NotFoundError):
                await service.complete_checklist(db, uuid.uuid4(), housekeeper_user)

        assert service._locks == {}
        assert service._waiters == {}

    async def test_lock_released_after_success(self, db, housekeeper_user, checklist):
        service = ChecklistService()

        started = await service.start_checklist(
            db, checklist.id, housekeeper_user, RequestLocationProvider(AT_PROPERTY)
        )

        assert started.status == "in_progress"
        assert service._locks == {}
        assert service._waiters == {}

    async def test_waiters_share_one_lock(self, db, housekeeper_user, checklist):
        """같은 체크리스트 동시 요청 — 마지막 요청이 끝나야 정리."""
        service = ChecklistService()

        results = await asyncio.gather(
            service.complete_checklist(db, checklist.id, housekeeper_user),
            service.complete_checklist(db, checklist.id, housekeeper_user),
            return_exceptions=True,
        )

        assert all(isinstance(result, ChecklistEngineError) for result in results)
        assert service._locks == {}
        assert service._waiters == {}


# ---------------------------------------------------------------------------
# 파일 기반 DB — two real connections need a database both can open
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def file_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'checklists.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def started_checklist(file_engine: AsyncEngine) -> dict:
    """Bath 1개 작업, 진행 중 체크리스트를 커밋해 둡니다."""
    factory = async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False)

    async with factory() as session:
        admin = User(name="Race Admin", email="race-admin@test.com", role="admin")
        housekeeper = User(name="Race Housekeeper", email="race-hk@test.com", role="housekeeper")
        prop = Property(name="Race Cottage", latitude=ANCHOR_LAT, longitude=ANCHOR_LNG)
        bath = Room(name="Bath")
        scrub = Task(title="Scrub tub", estimated_time=20)
        session.add_all([admin, housekeeper, prop, bath, scrub])
        await session.flush()

        session.add_all([
            PropertyRoom(property_id=prop.id, room_id=bath.id, order=0),
            RoomTask(property_id=prop.id, room_id=bath.id, task_id=scrub.id, order=0),
        ])
        await session.flush()

        created = await checklist_service.create_checklist(
            session,
            property_id=prop.id,
            housekeeper_id=housekeeper.id,
            scheduled_date=date(2026, 10, 18),
            user=admin,
        )
        await session.commit()

        started = await checklist_service.start_checklist(
            session, created.id, housekeeper, RequestLocationProvider(AT_PROPERTY)
        )
        await session.commit()

        return {
            "factory": factory,
            "checklist_id": started.id,
            "item_id": started.items[0].id,
            "version": started.version,
            "housekeeper": housekeeper,
        }


class TestConcurrentSubmission:
    """같은 항목 동시 제출 — 하나만 성공."""

    async def test_same_item_submitted_twice(self, started_checklist):
        factory = started_checklist["factory"]
        checklist_id = started_checklist["checklist_id"]
        item_id = started_checklist["item_id"]
        housekeeper = started_checklist["housekeeper"]

        async def attempt(notes: str) -> tuple[str, str]:
            async with factory() as session:
                try:
                    await checklist_service.submit_item(
                        session, checklist_id, item_id, housekeeper, notes=notes
                    )
                    await session.commit()
                    return "ok", notes
                except ChecklistEngineError as exc:
                    await session.rollback()
                    return exc.code, notes

        results = await asyncio.gather(attempt("first"), attempt("second"))

        codes = sorted(code for code, _ in results)
        assert codes[1] == "ok"
        assert codes[0] in ("concurrent_modification", "item_locked")
        winner = next(notes for code, notes in results if code == "ok")

        async with factory() as session:
            reloaded = await checklist_service.get_checklist(session, checklist_id)
            item = reloaded.items[0]
            assert item.completed is True
            assert item.notes == winner
            assert reloaded.version == started_checklist["version"] + 1

        assert checklist_service._locks == {}
