"""Database Session Manager — pooled async engine, per-request sessions, error translation.

Invariants:
    - A session that raises is rolled back before the error propagates
    - SQLAlchemy exceptions never reach route handlers raw: translate_db_error
      turns them into PecupError (400 for constraint violations, 503 otherwise)
    - PecupError raised inside a session passes through unchanged

Design Decisions:
    - db_manager is a module-level singleton set by init_db() from the FastAPI
      lifespan; importing this module opens no connections
    - expire_on_commit=False: handlers serialize rows after commit without
      triggering async lazy loads
    - Failure audit rows are written from a second session of the same manager,
      so they survive the rollback of the request session
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from pecup.core.errors import (
    DatabaseError, DuplicateEntryError, InputValidationError, PecupError,
)

logger = logging.getLogger(__name__)


def translate_db_error(error: SQLAlchemyError) -> PecupError:
    """Map a driver/ORM failure onto the API error hierarchy."""
    if isinstance(error, IntegrityError):
        detail = str(error.orig).lower()
        logger.warning(f"Constraint violation: {error.orig}")
        if "foreign key" in detail:
            return InputValidationError("Referenced record does not exist")
        if "check constraint" in detail:
            return InputValidationError("Value out of allowed range")
        return DuplicateEntryError("Duplicate entry")
    if isinstance(error, OperationalError):
        logger.error(f"Database unreachable: {error}")
        return DatabaseError("Connection or operational error", "execute")
    if isinstance(error, DBAPIError):
        logger.error(f"Database driver error: {error}")
        return DatabaseError("Database driver error", "query")
    logger.error(f"SQLAlchemy error: {error}")
    return DatabaseError("Database operation failed", "unknown")


class DatabaseSessionManager:
    """Owns the engine and hands out sessions that clean up after themselves."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            raise translate_db_error(e) from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """SELECT 1 through a fresh session; False on any failure."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except (PecupError, OSError) as e:
            logger.error(f"DB health check failed: {e}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> None:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
