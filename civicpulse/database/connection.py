"""
Async SQLAlchemy plumbing for the complaint store.

PostgreSQL (asyncpg) in deployment; any async URL in ``DATABASE_URL`` wins,
which is how the tests run against in-memory SQLite.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from civicpulse.providers.settings import get_settings


class Base(DeclarativeBase):
    """Declarative base shared by complaints, users, attachments and the cache."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_database_url() -> str:
    """``DATABASE_URL`` when set, otherwise the asyncpg URL built from the POSTGRES_* settings."""
    settings = get_settings()
    if settings.database_url:
        return settings.database_url
    return (
        f"postgresql+asyncpg://{settings.postgres_user}:{settings.postgres_password}"
        f"@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_database}"
    )


def _build_engine(url: str) -> AsyncEngine:
    if url.startswith("sqlite"):
        # In-memory SQLite lives as long as its one connection
        return create_async_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(
        url,
        pool_size=get_settings().postgres_pool_max_size,
        max_overflow=10,
        pool_pre_ping=True,
    )


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = _build_engine(get_database_url())
    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Transactional session for code running outside a request (e.g. the geocode cache)."""
    async with get_session_maker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one transactional session per request.

    A request that fails leaves no partial complaint, comment or attachment behind.
    """
    async with get_session() as session:
        yield session


async def init_db() -> None:
    """Create any missing tables. Migrations are managed by Alembic; this covers dev and tests."""
    import civicpulse.database.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
