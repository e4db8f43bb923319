"""Async database engine and session management.

One session per request. The session is the transactional boundary: every
write a route makes is committed together when the handler returns, or
rolled back together if it raises. Routes that schedule background tasks
commit explicitly first, since dependency teardown runs after those tasks.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from reelbook.core.config import settings


def _engine_options(url: str) -> dict:
    # SQLite uses a single-connection pool that rejects sizing arguments
    if url.startswith("sqlite"):
        return {}
    return {"pool_size": 20, "max_overflow": 10, "pool_pre_ping": True}


engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    **_engine_options(settings.database_url),
)

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session. Used as a FastAPI dependency."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
