# app/core/database.py
from typing import Any, AsyncIterator, Dict
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from app.core.config import settings

database_url = settings.DATABASE_URL


def engine_options(url: str) -> Dict[str, Any]:
    """Pool options for the configured backend.

    SQLite uses a single-connection pool of its own, so the sizing knobs
    only apply to server databases.
    """
    options: Dict[str, Any] = {
        "echo": False,
        "future": True,
    }
    if make_url(url).get_backend_name() == "sqlite":
        return options
    options.update(
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
    )
    return options


engine = create_async_engine(database_url, **engine_options(database_url))

async_session_maker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

async def get_async_session() -> AsyncIterator[AsyncSession]:
    async with async_session_maker() as session:
        yield session
