"""Service test fixtures — async DB + FastAPI test client + ledger runtime.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - get_ledger_runtime overridden with a fresh ledger administered by "admin"

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - Metered InMemoryAssetTransferService is swapped in per test when balances matter
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

import seedchain.models  # noqa: F401
from seedchain.core.ledger_state import LedgerState
from seedchain.db.base import Base
from seedchain.infrastructure.asset_transfer import InMemoryAssetTransferService
from seedchain.infrastructure.clock import SequenceClock
from seedchain.infrastructure.database import get_db
from seedchain.main import app
from seedchain.services.ledger_runtime import LedgerRuntime, get_ledger_runtime
from seedchain.services.ledger_service import LedgerService


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def transfer_service():
    return InMemoryAssetTransferService()


@pytest.fixture
def ledger_runtime(transfer_service):
    service = LedgerService(
        LedgerState(administrator="admin"),
        transfer_service,
        SequenceClock(1000),
        "custody",
    )
    return LedgerRuntime(service=service)


@pytest.fixture
async def client(test_session_factory, ledger_runtime):
    """FastAPI test client with DB and ledger dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ledger_runtime] = lambda: ledger_runtime

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
