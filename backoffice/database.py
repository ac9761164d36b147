"""
Database engine and session factory
"""
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from backoffice.config import Settings, get_settings

ASYNC_DRIVERS = {
    "postgresql://": "postgresql+asyncpg://",
    "sqlite:///": "sqlite+aiosqlite:///",
}

POOL_SIZE = 20
MAX_OVERFLOW = 10

Base = declarative_base()


def to_async_url(url: str) -> str:
    """Swap a sync driver prefix for its async equivalent"""
    for sync_prefix, async_prefix in ASYNC_DRIVERS.items():
        if url.startswith(sync_prefix):
            return async_prefix + url[len(sync_prefix):]
    return url


def build_engine(settings: Settings) -> AsyncEngine:
    url = to_async_url(settings.DATABASE_URL)
    options = {"echo": settings.DEBUG, "future": True}
    # SQLite has no connection pool to size
    if not url.startswith("sqlite"):
        options.update(pool_size=POOL_SIZE, max_overflow=MAX_OVERFLOW)
    return create_async_engine(url, **options)


engine = build_engine(get_settings())

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def get_session_factory() -> async_sessionmaker:
    """
    Dependency for getting the session factory.

    Services open one short-lived session per store operation so that
    independent writes (e.g. priority renumbering) can run concurrently.
    """
    return AsyncSessionLocal
