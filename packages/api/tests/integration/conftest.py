# This project was developed with assistance from AI tools.
"""Integration test fixtures -- real PostgreSQL, no mocks.

A session-scoped container provides PostgreSQL; the schema is created from
the ORM metadata once per run. Concurrency tests need every worker on its
own connection, so tests here commit through real sessions and the tables
are truncated after each test instead of rolled back.
"""

import asyncio

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from testcontainers.postgres import PostgresContainer

# ---------------------------------------------------------------------------
# Mark all tests in this directory as integration
# ---------------------------------------------------------------------------
pytestmark = pytest.mark.integration


# ---------------------------------------------------------------------------
# Session-scoped: container + engine + schema
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def pg_container():
    """Start postgres:16-alpine via testcontainers."""
    with PostgresContainer(
        image="postgres:16-alpine",
        username="test",
        password="test",
        dbname="test",
    ) as pg:
        yield pg


@pytest.fixture(scope="session")
def db_url(pg_container):
    """Async DB URL for asyncpg."""
    host = pg_container.get_container_host_ip()
    port = pg_container.get_exposed_port(5432)
    return f"postgresql+asyncpg://test:test@{host}:{port}/test"


@pytest.fixture(scope="session")
def async_engine(db_url):
    """NullPool engine: every session gets a fresh connection on the current loop."""
    from db import Base

    engine = create_async_engine(db_url, echo=False, poolclass=NullPool)

    async def _create_schema():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_create_schema())
    yield engine


@pytest.fixture(scope="session", autouse=True)
def _patch_db_module(async_engine):
    """Point db.database globals and by-name imports at the test database.

    ``scholarship_api.services.notification`` binds ``SessionLocal`` at import
    time, so patching ``db.database`` alone would leave notifications on the
    original factory.
    """
    import db.database as db_mod

    from scholarship_api.services import notification as notification_mod

    test_session_factory = async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )
    db_mod.engine = async_engine
    db_mod.SessionLocal = test_session_factory
    db_mod.db_service = db_mod.DatabaseService(engine=async_engine)
    notification_mod.SessionLocal = test_session_factory


@pytest.fixture
def session_factory():
    import db.database as db_mod

    return db_mod.SessionLocal


@pytest_asyncio.fixture(autouse=True)
async def _truncate_all(async_engine):
    """Yield-based: truncates all tables after the test completes."""
    yield
    from db import Base

    tables = ", ".join(t.name for t in Base.metadata.sorted_tables)
    async with async_engine.begin() as conn:
        await conn.execute(text(f"TRUNCATE TABLE {tables} RESTART IDENTITY CASCADE"))


@pytest.fixture
def client_factory(session_factory):
    """Factory returning an async httpx client acting as ``user``.

    Each request gets its own session, as it would in production.
    """
    import db.database as db_mod
    from db.database import get_db, get_db_service

    from scholarship_api.main import app
    from scholarship_api.middleware.auth import get_current_user

    def _make(user):
        async def _get_db():
            async with session_factory() as session:
                yield session

        async def _get_current_user():
            return user

        async def _get_db_service():
            return db_mod.db_service

        app.dependency_overrides[get_db] = _get_db
        app.dependency_overrides[get_current_user] = _get_current_user
        app.dependency_overrides[get_db_service] = _get_db_service
        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        return httpx.AsyncClient(transport=transport, base_url="http://test")

    yield _make

    app.dependency_overrides.clear()
