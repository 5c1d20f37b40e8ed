"""
Database connection, session management and transaction helpers.
Uses SQLAlchemy 2.0 async pattern.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy import event
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from secaware.config import get_settings
from secaware.kernel.errors import StorageUnavailable
from secaware.logging_config import get_logger

logger = get_logger(__name__)


def configure_sqlite(engine: AsyncEngine) -> None:
    """
    Make SQLite transactions explicit so SAVEPOINTs roll back correctly.

    pysqlite defers BEGIN on its own; turning that off and emitting BEGIN
    ourselves gives begin_nested() real transactional semantics. BEGIN
    IMMEDIATE takes the write lock up front, so concurrent writers wait on
    busy_timeout in turn instead of deadlocking on lock upgrade.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_conn, connection_record):
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine_for(database_url: str, echo: bool = False) -> AsyncEngine:
    """Build an engine with per-backend options."""
    if database_url.startswith("sqlite"):
        # NullPool: every session gets its own connection
        engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )
        configure_sqlite(engine)
        return engine
    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


settings = get_settings()
engine = create_engine_for(settings.database_url, echo=settings.debug)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session: commit on success, roll back on error."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except DBAPIError as exc:
            await session.rollback()
            logger.warning("Storage failure on commit: %s", exc.orig)
            raise StorageUnavailable("Progress storage is unavailable, please retry") from exc
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a multi-row unit of work inside a SAVEPOINT.

    Either every write in the block is kept or none is. Driver failures
    surface as StorageUnavailable; uniqueness violations that escape the
    block are treated the same way since the caller did not expect them.
    """
    try:
        async with session.begin_nested():
            yield session
    except IntegrityError as exc:
        logger.warning("Unexpected integrity error in unit of work: %s", exc.orig)
        raise StorageUnavailable("Progress could not be saved, please retry") from exc
    except DBAPIError as exc:
        logger.warning("Storage failure in unit of work: %s", exc.orig)
        raise StorageUnavailable("Progress storage is unavailable, please retry") from exc


async def init_db() -> None:
    """Create tables (development convenience; production uses alembic)."""
    from secaware.kernel.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
