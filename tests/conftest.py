import os

# Settings are read at import time; point them at SQLite before importing the app.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_IDS"] = ""
os.environ["SUPERVISOR_IDS"] = ""

from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from feedback360.core.security import create_access_token
from feedback360.database import Base, get_db
from feedback360.main import app
from feedback360.models.assessment import AssessmentPeriod
from feedback360.models.profile import Profile, UserRole
from feedback360.utils.password import hash_password


@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db_session(session_factory):
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
def make_user(db_session):
    counter = {"n": 0}

    async def _make_user(full_name=None, role=None, password=None, **fields):
        counter["n"] += 1
        n = counter["n"]
        profile = Profile(
            email=fields.pop("email", f"user{n}@company.co.id"),
            full_name=full_name or f"User {n}",
            hashed_password=hash_password(password) if password else None,
            **fields,
        )
        db_session.add(profile)
        await db_session.flush()
        if role:
            db_session.add(UserRole(user_id=profile.id, role=role))
        await db_session.commit()
        return profile

    return _make_user


@pytest.fixture
def make_period(db_session):
    async def _make_period(year=2025, month=7, is_active=True, start_date=None, end_date=None):
        period = AssessmentPeriod(
            year=year,
            month=month,
            start_date=start_date or date(year, month, 1),
            end_date=end_date or date(year, month, 28),
            is_active=is_active,
            is_completed=False,
        )
        db_session.add(period)
        await db_session.commit()
        return period

    return _make_period


@pytest.fixture
def auth_headers():
    def _auth_headers(profile):
        token = create_access_token({"sub": profile.id})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
