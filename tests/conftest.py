"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite DB, session, and httpx client fixtures.
Each test gets a fresh database built from the ORM metadata, so no
PostgreSQL server is needed. Photos are stored under a temporary directory.
"""

from collections.abc import AsyncGenerator
from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.database import Base, get_db
from app.main import app
from app.models import *  # noqa: F401,F403 — register all models with metadata
from app.utils.jwt import create_access_token

TEST_DATABASE_URL = "sqlite+aiosqlite://"

# 숙소 기준 좌표 — Property geofence anchor used by the fixtures
ANCHOR_LAT = 37.5665
ANCHOR_LNG = 126.9780
# 위도 1도당 미터 (R = 6,371 km) — Meters per degree of latitude
METERS_PER_DEGREE_LAT = 111_194.93

# 1x1 PNG — 테스트용 최소 이미지 (Smallest valid test image)
PNG_B64 = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def north_of_anchor(meters: float) -> dict[str, float]:
    """기준 좌표에서 북쪽으로 meters 떨어진 위치 (A coordinate ``meters`` north of the anchor)."""
    return {"latitude": ANCHOR_LAT + meters / METERS_PER_DEGREE_LAT, "longitude": ANCHOR_LNG}


# ---------------------------------------------------------------------------
# 환경 격리 — Keep storage local and logging off
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """사진 저장 경로를 임시 디렉토리로, 외부 연동은 비활성화합니다."""
    monkeypatch.setattr(settings, "LOCAL_UPLOADS_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "AWS_ACCESS_KEY_ID", "")
    monkeypatch.setattr(settings, "AWS_S3_BUCKET", "")
    monkeypatch.setattr(settings, "GEOFENCE_RADIUS_METERS", 150.0)
    return settings


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진 — 테스트마다 새 인메모리 DB와 스키마."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def _make_user(db: AsyncSession, name: str, email: str, role: str):
    from app.models.user import User
    user = User(name=name, email=email, role=role)
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession):
    """관리자 사용자를 생성합니다."""
    return await _make_user(db, "Test Admin", "admin@test.com", "admin")


@pytest_asyncio.fixture
async def owner_user(db: AsyncSession):
    """숙소 소유자 사용자를 생성합니다."""
    return await _make_user(db, "Test Owner", "owner@test.com", "property_owner")


@pytest_asyncio.fixture
async def other_owner_user(db: AsyncSession):
    """다른 숙소 소유자를 생성합니다."""
    return await _make_user(db, "Other Owner", "other-owner@test.com", "property_owner")


@pytest_asyncio.fixture
async def housekeeper_user(db: AsyncSession):
    """하우스키퍼 사용자를 생성합니다."""
    return await _make_user(db, "Test Housekeeper", "hk@test.com", "housekeeper")


@pytest_asyncio.fixture
async def other_housekeeper_user(db: AsyncSession):
    """배정되지 않은 하우스키퍼를 생성합니다."""
    return await _make_user(db, "Other Housekeeper", "hk2@test.com", "housekeeper")


@pytest_asyncio.fixture
async def property_layout(db: AsyncSession, owner_user):
    """숙소 1곳과 방/작업 배치를 생성합니다.

    Kitchen (order 0): 사진 2장 필수, 작업 2개
    Bath (order 1): 사진 요구 없음, 작업 1개
    Garage (order 2): 비활성, 작업 1개 (체크리스트에서 제외)
    """
    from app.models.property import Property, PropertyRoom, Room, RoomTask, Task

    prop = Property(
        owner_id=owner_user.id,
        name="Seaside Villa",
        address="1 Ocean Rd",
        latitude=ANCHOR_LAT,
        longitude=ANCHOR_LNG,
    )
    kitchen = Room(name="Kitchen")
    bath = Room(name="Bath")
    garage = Room(name="Garage")
    wipe = Task(title="Wipe counters", estimated_time=10)
    dishes = Task(title="Do dishes", estimated_time=15)
    scrub = Task(title="Scrub tub", estimated_time=20)
    sweep = Task(title="Sweep floor", estimated_time=5)
    db.add_all([prop, kitchen, bath, garage, wipe, dishes, scrub, sweep])
    await db.flush()

    db.add_all([
        PropertyRoom(property_id=prop.id, room_id=bath.id, order=1, requires_photo=False),
        PropertyRoom(property_id=prop.id, room_id=kitchen.id, order=0, requires_photo=True, photos_required_count=2),
        PropertyRoom(property_id=prop.id, room_id=garage.id, order=2, is_active=False),
        # 작업 순서가 삽입 순서와 다름 — Task order differs from insertion order
        RoomTask(property_id=prop.id, room_id=kitchen.id, task_id=dishes.id, order=1),
        RoomTask(property_id=prop.id, room_id=kitchen.id, task_id=wipe.id, order=0),
        RoomTask(property_id=prop.id, room_id=bath.id, task_id=scrub.id, order=0),
        RoomTask(property_id=prop.id, room_id=garage.id, task_id=sweep.id, order=0),
    ])
    await db.flush()

    return {
        "property": prop,
        "kitchen": kitchen,
        "bath": bath,
        "garage": garage,
        "tasks": {"wipe": wipe, "dishes": dishes, "scrub": scrub, "sweep": sweep},
    }


@pytest_asyncio.fixture
async def checklist(db: AsyncSession, property_layout, housekeeper_user, admin_user):
    """숙소 배치로 pending 체크리스트를 생성합니다."""
    from app.services.checklist_service import checklist_service
    created = await checklist_service.create_checklist(
        db,
        property_id=property_layout["property"].id,
        housekeeper_id=housekeeper_user.id,
        scheduled_date=date(2026, 10, 18),
        user=admin_user,
    )
    await db.commit()
    return created


def make_token(user) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(user.id), "role": user.role})


@pytest.fixture
def admin_token(admin_user) -> str:
    return make_token(admin_user)


@pytest.fixture
def owner_token(owner_user) -> str:
    return make_token(owner_user)


@pytest.fixture
def other_owner_token(other_owner_user) -> str:
    return make_token(other_owner_user)


@pytest.fixture
def housekeeper_token(housekeeper_user) -> str:
    return make_token(housekeeper_user)


@pytest.fixture
def other_housekeeper_token(other_housekeeper_user) -> str:
    return make_token(other_housekeeper_user)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
