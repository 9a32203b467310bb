"""
CampusLog Backend — Database Engine Management
================================================

What:  Async SQLAlchemy engine, session factory, and declarative base for the
       SQL table backend (STORE_BACKEND=database).
Why:   Local development and the test-suite need a table store that does not
       talk to Google. A single generic `table_rows` table stands in for every
       spreadsheet tab.
How:   `build_engine()` creates an async engine from a URL; the container owns
       the engine and disposes it at shutdown. Nothing here is created at
       import time, so tests can point the engine at a temporary file.

Connection Pooling Strategy:
    Server databases (PostgreSQL via asyncpg) get a bounded pool:
    pool_size + max_overflow connections, pre-ping, hourly recycle.
    SQLite (aiosqlite) uses SQLAlchemy's default pool; pool sizing arguments
    are rejected by its dialect.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object, which Alembic's env.py and init_models() read.
    """
    pass


def build_engine(
    database_url: str,
    pool_size: int = 20,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    echo: bool = False,
) -> AsyncEngine:
    """
    Create the async engine for `database_url`.

    Args:
        database_url:  e.g. "postgresql+asyncpg://..." or "sqlite+aiosqlite:///..."
        pool_size:     Persistent connections (server databases only)
        max_overflow:  Extra connections for spikes (server databases only)
        pool_pre_ping: Validate connections before use
        echo:          Log every SQL statement (DEBUG only)
    """
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=echo)

    return create_async_engine(
        database_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=pool_pre_ping,
        pool_recycle=3600,
        echo=echo,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: row objects stay readable after commit
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    """
    What:  Creates every table registered on Base.metadata that is missing.
    When:  At startup when DATABASE_AUTO_CREATE is true, and in test fixtures.
    Why:   SQLite development databases should work without running Alembic.
    """
    # Register models on the metadata before create_all
    from campuslog.models import table_row  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
