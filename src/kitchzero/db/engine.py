"""Async SQLAlchemy engine, session creation and transaction scoping."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from kitchzero.config import settings
from kitchzero.errors.exceptions import TransactionFailureError

logger = logging.getLogger(__name__)


def create_db_engine(url: str | None = None):
    """Create an async SQLAlchemy engine."""
    db_url = url or settings.effective_database_url
    engine_kwargs: dict = {"echo": False}

    # SQLite does not support pool_size / max_overflow
    if "sqlite" not in db_url:
        engine_kwargs.update(pool_size=10, max_overflow=20)

    return create_async_engine(db_url, **engine_kwargs)


def create_session_factory(engine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def unit_of_work(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run a block of reads and writes as one transaction.

    Commits when the block exits normally and rolls back on any exception.
    Store errors surface as TransactionFailureError; domain errors raised
    inside the block propagate unchanged after the rollback.
    """
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Transaction aborted: %s", exc)
        raise TransactionFailureError(str(exc)) from exc
    except BaseException:
        await session.rollback()
        raise
