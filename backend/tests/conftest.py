"""Pytest configuration and fixtures."""

import os

# Set test environment variables BEFORE importing anything that loads config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id.apps.googleusercontent.com"
os.environ["GOOGLE_CLIENT_SECRET"] = "test-client-secret"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from auth import create_session_token
from database import get_session
from main import app
from models import Course, User


@pytest_asyncio.fixture
async def session_factory():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    # https so the Secure session cookie is sent back by the client
    async with AsyncClient(transport=ASGITransport(app=app), base_url="https://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    async def _make_user(user_id: int, refresh_token: str = "", **fields) -> User:
        user = User(
            id=user_id,
            googleId=f"google-{user_id}",
            email_address=f"user{user_id}@example.com",
            name=f"User {user_id}",
            verified=True,
            refreshToken=refresh_token,
            **fields,
        )
        async with session_factory() as session:
            session.add(user)
            await session.commit()
            await session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_course(session_factory):
    async def _make_course(user_id: int, name: str, **fields) -> Course:
        course = Course(userId=user_id, IndivCourse=name, **fields)
        async with session_factory() as session:
            session.add(course)
            await session.commit()
            await session.refresh(course)
        return course

    return _make_course


@pytest.fixture
def get_course(session_factory):
    async def _get_course(course_id: int):
        async with session_factory() as session:
            return await session.get(Course, course_id)

    return _get_course


@pytest.fixture
def auth_headers():
    def _auth_headers(user_id: int, email: str = "") -> dict:
        token = create_session_token(user_id, email or f"user{user_id}@example.com")
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
