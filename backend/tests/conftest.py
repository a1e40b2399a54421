"""Root conftest — shared test configuration."""

import os

# Tests never reach a real database or custody service
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("TRANSFER_BACKEND", "memory")
os.environ.setdefault("LOG_FORMAT", "text")
