"""
Database engine and session management.

Provides async SQLAlchemy engine and session factory for FastAPI, and the
transaction helpers shared by every ledger.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, AsyncIterator, Hashable
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tcgserver.config import settings
from tcgserver.models.db import Base
from tcgserver.models.failure import InternalError

logger = logging.getLogger(__name__)

# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

# Session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Usage in FastAPI:
        @app.get("/items")
        async def get_items(session: AsyncSession = Depends(get_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a unit of work as one transaction on `session`.

    Commits when the block exits cleanly. Any exception rolls back
    everything written in the block. Storage errors are re-raised as
    InternalError; business errors propagate unchanged.
    """
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error("Transaction rolled back: %s", e)
        raise InternalError(detail=str(e)) from e
    except Exception:
        await session.rollback()
        raise


class KeyedLocks:
    """
    In-process mutex per key.

    Row locks (SELECT ... FOR UPDATE) serialize writers across processes on
    PostgreSQL; SQLite has no row locks, so writers in this process also
    queue on an asyncio.Lock for the same key.

    A key's lock exists only while someone holds or waits for it.
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    def locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


# Serializes progression read-modify-write per user
user_locks = KeyedLocks()

# Serializes inventory reads that feed deck creation, per user
inventory_locks = KeyedLocks()

# Serializes compare-and-append on match state, per table
table_locks = KeyedLocks()


async def init_db() -> None:
    """
    Initialize database tables.

    Creates all tables defined in the ORM models.
    Should be called once at application startup.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
