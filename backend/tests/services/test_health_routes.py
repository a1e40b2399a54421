"""Health Routes — liveness and ledger readiness.

Invariants:
    - Readiness is 503 until both the database and the ledger runtime are up
    - A ready service reports campaign status and raised total
"""

import seedchain.infrastructure.database as database
import seedchain.services.ledger_runtime as ledger_runtime_module
from seedchain.infrastructure.database import DatabaseSessionManager

READY = "/api/v1/health/ready"


async def test_readiness_without_database_or_ledger(client, monkeypatch):
    monkeypatch.setattr(database, "db_manager", None)
    monkeypatch.setattr(ledger_runtime_module, "_runtime", None)

    res = await client.get(READY)

    assert res.status_code == 503
    assert res.json() == {
        "status": "not_ready",
        "checks": {"database": "unavailable", "ledger": "unavailable"},
    }


async def test_readiness_reports_unloaded_ledger(client, monkeypatch):
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    monkeypatch.setattr(database, "db_manager", manager)
    monkeypatch.setattr(ledger_runtime_module, "_runtime", None)

    res = await client.get(READY)
    await manager.dispose()

    assert res.status_code == 503
    assert res.json()["checks"] == {"database": "healthy", "ledger": "unavailable"}


async def test_readiness_with_loaded_ledger(client, ledger_runtime, monkeypatch):
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    monkeypatch.setattr(database, "db_manager", manager)
    monkeypatch.setattr(ledger_runtime_module, "_runtime", ledger_runtime)
    await ledger_runtime.service.initialize("admin", "admin", 100, 10)

    res = await client.get(READY)
    await manager.dispose()

    assert res.status_code == 200
    body = res.json()
    assert body["checks"] == {"database": "healthy", "ledger": "healthy"}
    assert body["campaign"] == {"status": "active", "raised": 0}
