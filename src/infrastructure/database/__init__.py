"""
Database Infrastructure
=======================

Process-wide async engine and session factory for the complaint store.

SQLAlchemy 2.0 async: asyncpg against PostgreSQL in deployment, aiosqlite
for local runs and the test suite. The engine is created once at startup
(``init_database``) and disposed at shutdown (``close_database``).
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.config import settings


class Base(DeclarativeBase):
    """Declarative base shared by the complaint and configuration tables."""


_engine: Optional[AsyncEngine] = None
_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def get_engine() -> AsyncEngine:
    """
    Current engine.

    Raises:
        RuntimeError: init_database() has not run yet
    """
    if _engine is None:
        raise RuntimeError("No database engine; call init_database() during startup")
    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the current engine."""
    if _session_maker is None:
        raise RuntimeError("No session factory; call init_database() during startup")
    return _session_maker


def init_database(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Create the engine and session factory, replacing any previous ones.

    Pool sizing is applied to server databases only; SQLite keeps
    SQLAlchemy's default pool.
    """
    global _engine, _session_maker

    url = (database_url or settings.database_url).replace("sslmode=", "ssl=")
    options = {"echo": settings.debug}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=True,
        )

    _engine = create_async_engine(url, **options)
    # Entities are mapped out of the session after commit
    _session_maker = async_sessionmaker(bind=_engine, expire_on_commit=False, autoflush=False)
    return _engine


async def close_database() -> None:
    """Dispose the engine's pool at shutdown."""
    global _engine, _session_maker

    engine, _engine, _session_maker = _engine, None, None
    if engine is not None:
        await engine.dispose()


@asynccontextmanager
async def get_session_context() -> AsyncIterator[AsyncSession]:
    """
    One unit of work: committed on exit, rolled back if the block raises.

    Usage outside request handling:
        async with get_session_context() as session:
            ...
    """
    async with get_session_maker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one unit of work per request."""
    async with get_session_context() as session:
        yield session


async def create_tables() -> None:
    """Create any missing tables. Deployments use migrations instead."""
    # Registers the mapped classes on Base.metadata
    import src.complaints.infrastructure.models  # noqa: F401
    import src.sla.infrastructure.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
