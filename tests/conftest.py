"""
Test Configuration and Fixtures
Provides shared test setup for all test cases
"""
import os

# Settings are read at import time; these must be in place before app is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")

import sys
import uuid
from unittest.mock import patch

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database.connection import Base
from app.models.user import User
from app.utils.security import get_password_hash

# Test database URL (use in-memory SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

DEFAULT_PASSWORD = "StrongPass123"

MODULES_TO_PATCH = [
    'app.services.auth_service',
    'app.services.listing_service',
    'app.database.connection',
]


@pytest_asyncio.fixture(scope="function")
async def db_session():
    """Create a fresh database and session for each test"""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestSessionLocal = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def patched_sessions(db_session):
    """Route every service's AsyncSessionLocal to the test session"""
    class TestSessionContext:
        def __init__(self, session):
            self.session = session
        async def __aenter__(self):
            return self.session
        async def __aexit__(self, *args):
            pass

    def make_test_session_local(session):
        return lambda: TestSessionContext(session)

    patches = []
    for module_name in MODULES_TO_PATCH:
        if module_name in sys.modules:
            module = sys.modules[module_name]
            if hasattr(module, 'AsyncSessionLocal'):
                patches.append(patch.object(module, 'AsyncSessionLocal', make_test_session_local(db_session)))

    for p in patches:
        p.start()
    try:
        yield db_session
    finally:
        for p in patches:
            p.stop()


@pytest_asyncio.fixture(scope="function")
async def client(patched_sessions):
    """Create test HTTP client"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def create_user(db_session, role: str = "seller", password: str = DEFAULT_PASSWORD) -> User:
    suffix = uuid.uuid4().hex[:10]
    user = User(
        id=str(uuid.uuid4()),
        name=f"Test {role.title()}",
        email=f"{role}_{suffix}@example.com",
        phone=str(uuid.uuid4().int)[:10].rjust(10, "9"),
        hashed_password=get_password_hash(password),
        role=role,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


async def login_headers(client: AsyncClient, user: User, password: str = DEFAULT_PASSWORD) -> dict:
    resp = await client.post("/api/auth/login", json={"email": user.email, "password": password})
    assert resp.status_code == 200, resp.text
    token = resp.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture(scope="function")
async def authenticated_seller(client: AsyncClient, db_session):
    """Create and authenticate a seller; returns (client, user, headers)"""
    seller = await create_user(db_session, role="seller")
    headers = await login_headers(client, seller)
    return client, seller, headers


@pytest_asyncio.fixture(scope="function")
async def other_seller_headers(client: AsyncClient, db_session):
    """Auth headers for a second seller who owns nothing"""
    other = await create_user(db_session, role="seller")
    return await login_headers(client, other)
