# This project was developed with assistance from AI tools.
"""Async engine, session factory and FastAPI session dependencies."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import TypeVar

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from .config import db_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

engine = create_async_engine(
    db_settings.DATABASE_URL,
    echo=db_settings.SQL_ECHO,
    pool_pre_ping=True,
)

SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)

T = TypeVar("T")


class DatabaseService:
    """Thin wrapper around the engine used for health checks and shutdown."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def health_check(self) -> bool:
        """Return True when the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except OperationalError:
            logger.warning("Database health check failed", exc_info=True)
            return False

    async def close(self) -> None:
        await self.engine.dispose()


db_service = DatabaseService(engine=engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, closed afterwards."""
    async with SessionLocal() as session:
        yield session


async def get_db_service() -> DatabaseService:
    return db_service


async def retry_read(
    operation: Callable[[], Awaitable[T]],
    *,
    session: AsyncSession | None = None,
    attempts: int | None = None,
    delay: float = 0.1,
) -> T:
    """Run an idempotent read, retrying transient connection failures.

    When ``session`` is given it is rolled back before each retry: after a
    dropped connection or an aborted transaction the session refuses further
    statements until the failed transaction is discarded.

    Only for reads: writes rely on conditional updates and are never retried.
    """
    max_attempts = attempts or db_settings.READ_RETRY_ATTEMPTS
    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except OperationalError:
            if attempt >= max_attempts:
                raise
            logger.warning(
                "Transient read failure (attempt %d/%d), retrying in %.2fs",
                attempt,
                max_attempts,
                delay * attempt,
            )
            if session is not None:
                await session.rollback()
            await asyncio.sleep(delay * attempt)
