"""Test configuration and fixtures"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from uuid import uuid4

from app.main import app
from app.database import Base, get_db
from app.booking.feed import ChangeFeed
from app.booking.holds import HoldStore
from app.dependencies import get_change_feed, get_hold_store, server_policy
from app.models.setting import Setting
from app.models.table import DiningTable
from app.models.user import User, UserRole
from app.api.auth import create_access_token, get_password_hash


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite so every request session sees committed rows"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(session_factory):
    """Session for arranging and inspecting rows directly"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def hold_store(clock):
    return HoldStore(policy=server_policy(), ttl_seconds=30, clock=clock)


@pytest.fixture
def change_feed():
    return ChangeFeed()


@pytest.fixture
def override_dependencies(session_factory, hold_store, change_feed):
    """Point the app at the test database and fresh booking state"""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_hold_store] = lambda: hold_store
    app.dependency_overrides[get_change_feed] = lambda: change_feed

    yield app

    app.dependency_overrides.clear()


def make_client(headers=None) -> AsyncClient:
    return AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=headers or {},
    )


@pytest.fixture
async def client(override_dependencies):
    """Anonymous guest client"""
    async with make_client() as client:
        yield client


@pytest.fixture
async def test_user(test_db):
    """Create a staff user"""
    user = User(
        id=uuid4(),
        email="staff@example.com",
        hashed_password=get_password_hash("staffpass123"),
        full_name="Staff User",
        role=UserRole.STAFF,
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def test_admin_user(test_db):
    """Create an admin user"""
    user = User(
        id=uuid4(),
        email="admin@example.com",
        hashed_password=get_password_hash("adminpass123"),
        full_name="Admin User",
        role=UserRole.ADMIN,
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def authenticated_client(override_dependencies, test_user):
    """Staff authenticated client"""
    token = create_access_token(test_user)
    async with make_client({"Authorization": f"Bearer {token}"}) as client:
        yield client


@pytest.fixture
async def admin_client(override_dependencies, test_admin_user):
    """Admin authenticated client"""
    token = create_access_token(test_admin_user)
    async with make_client({"Authorization": f"Bearer {token}"}) as client:
        yield client


@pytest.fixture
async def test_tables(test_db):
    """Three active tables"""
    tables = [
        DiningTable(id=1, name="T1", capacity=2),
        DiningTable(id=2, name="T2", capacity=4),
        DiningTable(id=3, name="T3", capacity=6),
    ]
    for table in tables:
        test_db.add(table)

    await test_db.commit()
    return tables


@pytest.fixture
async def one_table(test_db):
    """A single table, so one hold or booking fills every slot"""
    table = DiningTable(id=1, name="T1", capacity=4)
    test_db.add(table)
    await test_db.commit()
    return table


@pytest.fixture
async def evening_hours(test_db):
    """Open 18:00-23:00 every day: slots at 18:00, 19:45 and 21:30"""
    setting = Setting(
        key="business_hours",
        value={str(day): {"open": "18:00", "close": "23:00"} for day in range(7)},
    )
    test_db.add(setting)
    await test_db.commit()
    return setting.value
