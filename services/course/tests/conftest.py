from collections.abc import AsyncGenerator, Awaitable, Callable
from decimal import Decimal
from uuid import UUID, uuid4

import jwt
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401 - register with Base
from app.config import Settings
from app.database import get_db
from app.dependencies import get_settings
from app.main import create_app
from app.models.content_item import ContentItem
from app.models.course import Course
from app.models.enums import ContentType
from shared.database.postgres import Base, build_session_factory, get_async_engine, get_session

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_JWT_SECRET = "test-secret"

_DEFAULT_PAYLOADS = {
    ContentType.VIDEO: {"url": "https://cdn.example.com/intro.mp4"},
    ContentType.PDF: {"url": "https://cdn.example.com/notes.pdf"},
    ContentType.IMAGE: {"url": "https://cdn.example.com/diagram.png"},
    ContentType.TEXT: {"content": "Read me"},
    ContentType.NOTE: {"content": "Remember this"},
    ContentType.MCQ: {"question": "2 + 2?", "options": ["3", "4"], "correct_answer": 1},
    ContentType.ASSIGNMENT: {"title": "Homework", "description": "Write an essay"},
}


def _test_settings() -> Settings:
    return Settings(
        course_database_url=TEST_DATABASE_URL,
        redis_url="",
        jwt_secret=TEST_JWT_SECRET,
        jwt_algorithm="HS256",
        jwt_issuer=None,
        jwt_audience=None,
    )


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    # One shared in-memory connection so every session sees the same schema
    engine = get_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = build_session_factory(engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
def course_app(engine: AsyncEngine) -> FastAPI:
    course_app = create_app()
    session_factory = build_session_factory(engine)

    async def _get_db() -> AsyncGenerator[AsyncSession, None]:
        async for session in get_session(session_factory):
            yield session

    course_app.dependency_overrides[get_db] = _get_db
    course_app.dependency_overrides[get_settings] = _test_settings
    return course_app


@pytest_asyncio.fixture
async def async_client(course_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=course_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def make_token(user_id: UUID, secret: str = TEST_JWT_SECRET) -> str:
    return jwt.encode({"sub": str(user_id)}, secret, algorithm="HS256")


@pytest.fixture
def auth_headers() -> Callable[[UUID], dict[str, str]]:
    def _headers(user_id: UUID) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _headers


@pytest.fixture
def author_id() -> UUID:
    return uuid4()


@pytest.fixture
def learner_id() -> UUID:
    return uuid4()


@pytest.fixture
def make_course(db_session: AsyncSession) -> Callable[..., Awaitable[Course]]:
    async def _make(
        author_id: UUID,
        *,
        title: str = "Intro to Python",
        price: Decimal = Decimal("0"),
        is_published: bool = True,
        category: str | None = "programming",
    ) -> Course:
        course = Course(
            author_id=author_id,
            title=title,
            price=price,
            category=category,
            is_published=is_published,
        )
        db_session.add(course)
        await db_session.flush()
        return course

    return _make


@pytest.fixture
def make_content(db_session: AsyncSession) -> Callable[..., Awaitable[ContentItem]]:
    async def _make(
        course: Course,
        order: int,
        *,
        title: str | None = None,
        content_type: ContentType = ContentType.TEXT,
        is_preview: bool = False,
    ) -> ContentItem:
        item = ContentItem(
            course_id=course.course_id,
            title=title or f"Lesson {order}",
            content_type=content_type,
            data=dict(_DEFAULT_PAYLOADS[content_type]),
            order=order,
            is_preview=is_preview,
        )
        db_session.add(item)
        await db_session.flush()
        return item

    return _make
