"""
Postboard Backend — Database Session Management
=================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine with connection pooling and provides a session
       dependency that rolls back on error, plus `commit_session()` which
       handlers call before they build their response.
Who:   REST routes and the GraphQL context getter, via Depends(get_db_session).
When:  Engine is created at module import; sessions are created per request.

A post write and the matching update of the owner's post list run in the same
request session, so one `commit_session()` call commits them together.
"""

import logging
from typing import Any, AsyncGenerator, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from postboard.config import settings
from postboard.exceptions import DatabaseError

logger = logging.getLogger(__name__)


def _engine_options() -> Dict[str, Any]:
    # SQLite (tests, local runs) has no server-side pool to size
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


engine = create_async_engine(settings.database_url, **_engine_options())

# expire_on_commit=False: objects stay readable after commit without a new
# query, which would fail outside the session's greenlet context
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler or GraphQL context
        3. On error: rolls back and re-raises
        4. Always: rolls back anything left uncommitted and closes the session

    The exit code of a yield dependency runs after the response has been
    sent, so it never commits. Writes are committed by the handler through
    `commit_session()` before it returns.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def commit_session(session: AsyncSession) -> None:
    """
    Commits the request's writes before the response is built.

    Raises:
        DatabaseError: the commit failed; the session has been rolled back
    """
    try:
        await session.commit()
    except SQLAlchemyError as e:
        logger.error("Database error on commit: %s", str(e))
        await session.rollback()
        raise DatabaseError(context={"error_type": type(e).__name__})


async def dispose_engine() -> None:
    """Closes all pooled connections; called from the lifespan shutdown."""
    await engine.dispose()
