"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Callable, Generator
from pathlib import Path
from uuid import uuid4

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.security import hash_password
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base, UserModel
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork

# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "correct-horse-battery"

# Fixed test user ID for consistency
TEST_USER_ID = uuid4()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """UoW factory bound to the test database."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user with fixed ID."""
    return TokenUser(
        id=TEST_USER_ID,
        username="alice",
        email="alice@example.com",
        display_name="Alice",
    )


@pytest.fixture
def other_user() -> TokenUser:
    """A second user who must never see the test user's data."""
    return TokenUser(
        id=uuid4(),
        username="bob",
        email="bob@example.com",
        display_name="Bob",
    )


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def app(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
    session_factory: async_sessionmaker[AsyncSession],
    auth_provider: JWTAuthProvider,
) -> Generator[FastAPI, None, None]:
    """
    Application wired to the in-memory test database.

    Services and the health check use the test session factory, and
    tokens are validated with the test auth provider.
    """
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import (
        get_todo_list_service,
        get_todo_task_service,
        get_user_service,
    )
    from domain.services.todo_list_service import TodoListService
    from domain.services.todo_task_service import TodoTaskService
    from domain.services.user_service import UserService
    from infrastructure.database.session import get_async_session
    from main import create_app

    app = create_app()

    async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_user_service] = lambda: UserService(uow_factory)
    app.dependency_overrides[get_todo_list_service] = lambda: TodoListService(uow_factory)
    app.dependency_overrides[get_todo_task_service] = lambda: TodoTaskService(uow_factory)
    app.dependency_overrides[get_async_session] = override_get_async_session

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def _insert_user(
    session_factory: async_sessionmaker[AsyncSession], user: TokenUser
) -> None:
    async with session_factory() as session:
        session.add(
            UserModel(
                id=user.id,
                username=user.username,
                email=user.email,
                password_hash=hash_password(TEST_PASSWORD),
            )
        )
        await session.commit()


@pytest.fixture
async def authenticated_client(
    app: FastAPI,
    session_factory: async_sessionmaker[AsyncSession],
    test_user: TokenUser,
    auth_headers: dict[str, str],
) -> AsyncGenerator[AsyncClient, None]:
    """
    Client acting as the test user.

    The user row is inserted into the test database and every request
    carries a real bearer token for it.
    """
    await _insert_user(session_factory, test_user)

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=auth_headers
    ) as c:
        yield c


@pytest.fixture
async def other_client(
    app: FastAPI,
    session_factory: async_sessionmaker[AsyncSession],
    other_user: TokenUser,
    auth_provider: JWTAuthProvider,
) -> AsyncGenerator[AsyncClient, None]:
    """Client acting as a second, unrelated user on the same app."""
    await _insert_user(session_factory, other_user)

    token = auth_provider.create_token(other_user)
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"Authorization": f"Bearer {token}"},
    ) as c:
        yield c
