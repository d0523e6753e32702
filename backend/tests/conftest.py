"""
Formulario Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for error-path unit tests
    ├── db_engine: in-memory SQLite (aiosqlite) with the full schema
    ├── db_session: AsyncSession bound to db_engine
    ├── seed: helper that inserts a user, books and formulas and commits
    ├── make_formula: unsaved Formula rows for renderer tests
    └── test_client: HTTPX AsyncClient whose requests use db_engine
"""

import os

# Override settings BEFORE any formulario imports; config is read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from formulario import models  # noqa: F401  (registers tables on Base.metadata)
from formulario.database import Base, get_db_session
from formulario.models import Book, Formula, User

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_db_failure(mock_db_session):
            mock_db_session.execute.side_effect = RuntimeError("connection lost")
            with pytest.raises(DatabaseError):
                await book_service.get_book(mock_db_session, uuid4())
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine():
    """
    Fresh in-memory database per test.

    StaticPool hands every session the same connection, otherwise each
    connection to ":memory:" would see its own empty database.
    """
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@dataclass
class Seeded:
    """What `seed` inserted, keyed by name for readable assertions."""
    user: User
    books: Dict[str, Book] = field(default_factory=dict)
    formulas: Dict[str, Formula] = field(default_factory=dict)


@pytest.fixture
def seed(session_factory):
    """
    Insert a user plus books and formulas, then commit.

    Timestamps are spaced one minute apart in the order given, so ordering
    assertions never depend on clock resolution.

    Usage:
        data = await seed(
            books=["Geometry"],
            formulas=[("Geometry", "Pythagorean", "a² + b² = c²", "Right triangle relation")],
        )
    """

    async def _seed(
        books: List[str] = (),
        formulas: List[tuple] = (),
        deleted_books: List[str] = (),
        deleted_formulas: List[str] = (),
        user_id: str = "user-1",
    ) -> Seeded:
        tick = iter(range(1, 1000))

        def stamp() -> datetime:
            return BASE_TIME + timedelta(minutes=next(tick))

        async with session_factory() as session:
            user = User(id=user_id, name="Ada", email=f"{user_id}@example.com")
            session.add(user)
            data = Seeded(user=user)

            for name in books:
                moment = stamp()
                book = Book(
                    user_id=user_id,
                    name=name,
                    is_deleted=name in deleted_books,
                    created_at=moment,
                    updated_at=moment,
                )
                session.add(book)
                data.books[name] = book
            await session.flush()

            for book_name, name, text, description in formulas:
                moment = stamp()
                formula = Formula(
                    book_id=data.books[book_name].id,
                    user_id=user_id,
                    name=name,
                    formula_text=text,
                    description=description,
                    is_deleted=name in deleted_formulas,
                    created_at=moment,
                    updated_at=moment,
                )
                session.add(formula)
                data.formulas[name] = formula

            await session.commit()
        return data

    return _seed


@pytest.fixture
def make_formula():
    """Unsaved Formula for renderer tests (no database involved)."""

    def _make(name: str, formula_text: str = "x = 1", description=None) -> Formula:
        return Formula(name=name, formula_text=formula_text, description=description)

    return _make


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    get_db_session is overridden so requests run against db_engine with the
    same commit/rollback behavior as production.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/api/health")
            assert response.status_code == 200
    """
    from formulario.main import app

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
