"""
Database engine and sessions

Requests get a session from get_db(); background skill derivations open their
own through session_factory(). Both talk to the same engine, which is created
on first use so importing the package never touches the database.
"""
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from chronicle.core.config import settings
from chronicle.core.logging_config import logger

Base = declarative_base()

# SQLite waits this long for a concurrent writer (request vs. derivation task)
SQLITE_BUSY_TIMEOUT = 15

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def database_url() -> str:
    """DATABASE_URL with an async driver"""
    url = settings.DATABASE_URL
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://") and not url.startswith("sqlite+aiosqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        return {
            "connect_args": {"timeout": SQLITE_BUSY_TIMEOUT},
            "poolclass": NullPool,
        }
    return {"pool_pre_ping": True}


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        url = database_url()
        _engine = create_async_engine(url, echo=settings.DB_ECHO, **engine_options(url))
    return _engine


def session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Shared session factory.

    expire_on_commit is off: the gateway commits every write and callers keep
    using the returned records afterwards.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False
        )
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; anything left uncommitted on error is rolled back"""
    async with session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db():
    """Create the logbook tables that do not exist yet"""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"[Database] Tables ready: {', '.join(sorted(Base.metadata.tables))}")


async def close_db():
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
