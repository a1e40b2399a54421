"""Ledger Database — async engine and sessions backing the ledger repository.

Invariants:
    - A session that raises is rolled back before it is closed
    - Any SQLAlchemyError leaving a session becomes DatabaseError carrying the
      caller's ErrorContext (operation name, caller, project id)
    - Pool sizing applies to server databases only; SQLite keeps its default pool

Design Decisions:
    - One except branch: the ledger writes whole snapshots by merge, so every
      driver failure means the same thing to a caller (the write did not land)
    - Singleton db_manager built by the lifespan (ADR: no global import side effects)
    - expire_on_commit=False: rows stay readable after the snapshot commit
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from seedchain.core.errors import DatabaseError, ErrorContext

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Owns the engine; hands out sessions that map failures to DatabaseError."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(
        self, context: ErrorContext | None = None,
    ) -> AsyncGenerator[AsyncSession, None]:
        context = context or ErrorContext(operation="session")
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(
                f"Ledger database error during {context.operation}: {e}",
                extra={"caller": context.caller, "project_id": context.project_id},
            )
            raise DatabaseError(
                "Ledger database unavailable", context.operation or "session", context,
            )
        finally:
            await session.close()

    async def health_check(self) -> bool:
        try:
            async with self.session(ErrorContext(operation="health_check")) as db:
                await db.execute(text("SELECT 1"))
            return True
        except (DatabaseError, OSError) as e:
            logger.error(f"Ledger database health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per ledger request."""
    if not db_manager:
        raise DatabaseError("Database not initialized", "session")
    async with db_manager.session(ErrorContext(operation="request")) as session:
        yield session
