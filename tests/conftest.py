import os
import tempfile

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="cafeshift-logs-"))

import uuid
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from cafeshift.core.database import Base, get_db, enable_sqlite_foreign_keys
from cafeshift.core.security import get_password_hash
from cafeshift.main import app
from cafeshift.models.branch import Branch
from cafeshift.models.shift import Shift, ShiftStatus
from cafeshift.models.user import User, UserRole

PASSWORD = "Test123!"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine.sync_engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def branch(db: AsyncSession) -> Branch:
    branch = Branch(id=uuid.uuid4(), name="Main Street Cafe", address="1 Main St", timezone="UTC")
    db.add(branch)
    await db.commit()
    await db.refresh(branch)
    return branch


async def make_user(
    db: AsyncSession,
    branch: Branch,
    username: str,
    role: UserRole = UserRole.EMPLOYEE,
    hourly_rate: str = "15.00",
    position: str = "Barista",
    is_active: bool = True,
) -> User:
    user = User(
        id=uuid.uuid4(),
        username=username,
        password_hash=get_password_hash(PASSWORD),
        first_name=username.capitalize(),
        last_name="Tester",
        email=f"{username}@example.com",
        role=role,
        position=position,
        hourly_rate=Decimal(hourly_rate),
        branch_id=branch.id,
        is_active=is_active,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_shift(
    db: AsyncSession,
    user: User,
    start: datetime,
    hours: float,
    status: ShiftStatus = ShiftStatus.SCHEDULED,
) -> Shift:
    shift = Shift(
        id=uuid.uuid4(),
        user_id=user.id,
        branch_id=user.branch_id,
        start_time=start,
        end_time=start + timedelta(hours=hours),
        position=user.position,
        status=status,
    )
    db.add(shift)
    await db.commit()
    await db.refresh(shift)
    return shift


async def login_as(client: AsyncClient, user: User):
    response = await client.post(
        "/api/auth/login",
        json={"username": user.username, "password": PASSWORD},
    )
    assert response.status_code == 200, response.text
    return response


@pytest.fixture
async def manager(db: AsyncSession, branch: Branch) -> User:
    return await make_user(db, branch, "manny", role=UserRole.MANAGER, position="Store Manager", hourly_rate="25.00")


@pytest.fixture
async def employee(db: AsyncSession, branch: Branch) -> User:
    return await make_user(db, branch, "emma")


@pytest.fixture
async def coworker(db: AsyncSession, branch: Branch) -> User:
    return await make_user(db, branch, "carl")
