"""Engine and session factory.

One engine per process, built from settings. Requests get their own
AsyncSession through `get_db_session`.
"""

from typing import Any, AsyncGenerator

from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from billing_api.config import settings


def engine_options(url: str) -> dict[str, Any]:
    backend = make_url(url).get_backend_name()
    options: dict[str, Any] = {"echo": settings.DEBUG}

    if backend == "sqlite":
        # aiosqlite gains nothing from pooling. The sqlite3 busy timeout is the
        # store deadline, so a writer stuck behind another one fails as
        # "database is locked" instead of waiting on past it.
        options["poolclass"] = NullPool
        options["connect_args"] = {"timeout": settings.DB_OPERATION_TIMEOUT_SECONDS}
        return options

    options.update(
        pool_pre_ping=settings.DB_POOL_PRE_PING,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
        pool_recycle=settings.DB_POOL_RECYCLE_SECONDS,
    )
    if backend == "postgresql":
        options["isolation_level"] = settings.DB_POSTGRES_ISOLATION_LEVEL
    return options


def build_engine(url: str | None = None) -> AsyncEngine:
    url = url or settings.DATABASE_URL
    return create_async_engine(url, **engine_options(url))


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=bind, class_=AsyncSession, expire_on_commit=False, autoflush=False)


engine = build_engine()

AsyncSessionLocal = build_session_factory(engine)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
