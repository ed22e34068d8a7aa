"""
Async engine & session management.

One engine per process; one session (= one transaction) per request.
The session is committed when the route returns normally and rolled
back if anything raises, so a request's writes land all-or-nothing.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from iam.core.config import settings


def _set_sqlite_pragma(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def enable_sqlite_foreign_keys(target: AsyncEngine) -> None:
    """SQLite ignores FK clauses (and their cascades) unless asked per connection."""
    if target.dialect.name == "sqlite":
        event.listen(target.sync_engine, "connect", _set_sqlite_pragma)


engine = create_async_engine(
    settings.DATABASE_URL,
    # NullPool for SQLite to avoid cross-task connection reuse
    poolclass=NullPool if settings.DATABASE_URL.startswith("sqlite") else None,
    echo=False,
    future=True,
)
enable_sqlite_foreign_keys(engine)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a request-scoped session.

    Usage:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)): ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
