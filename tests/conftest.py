from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libs.common.config import get_settings
from libs.db.base import Base
from libs.db.session import get_async_db
from services.accounts_service.models import UserRole
from services.gateway_service.app.main import app
from tests.factories import UserFactory, bearer_for

settings = get_settings()


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh schema per test. SQLite in-memory needs a StaticPool so every
    connection sees the same database.
    """
    options = {}
    if settings.DATABASE_URL.startswith("sqlite"):
        options = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}

    engine = create_async_engine(settings.DATABASE_URL, future=True, **options)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session configured like the application's own sessions.
    """
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    session = session_factory()

    try:
        yield session
    finally:
        await session.close()


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient with the app and overridden DB dependency.
    """
    app.dependency_overrides[get_async_db] = lambda: db_session

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_user(db_session):
    user = UserFactory.create(role=UserRole.ADMIN, username="admin-tester")
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def customer(db_session):
    user = UserFactory.create()
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return bearer_for(admin_user)


@pytest.fixture
def customer_headers(customer) -> dict:
    return bearer_for(customer)
