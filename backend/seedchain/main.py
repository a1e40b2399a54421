"""Seedchain API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SeedchainError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and ledger runtime initialized on startup via lifespan context manager;
      the ledger resumes from the persisted state
    - Shutdown closes the custody client before disposing the connection pool

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import seedchain.infrastructure.database as database
from seedchain.api.error_handlers import register_error_handlers
from seedchain.api.routes import health, ledger
from seedchain.config import get_settings
from seedchain.core.errors import ErrorContext
from seedchain.infrastructure.ledger_repository import SqlLedgerRepository
from seedchain.infrastructure.observability import setup_logging
from seedchain.services.ledger_runtime import (
    init_ledger_runtime, shutdown_ledger_runtime,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    async with database.db_manager.session(ErrorContext(operation="load_ledger")) as db:
        state = await SqlLedgerRepository(db).load(settings.deployer_identity)
    init_ledger_runtime(state, settings)
    logger.info("Seedchain API started")
    yield
    await shutdown_ledger_runtime()
    await database.db_manager.dispose()
    logger.info("Seedchain API shutting down")


app = FastAPI(
    title="Seedchain Collective API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(ledger.router)

register_error_handlers(app)
