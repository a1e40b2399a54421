"""ORM Models — SQLAlchemy declarative models for the persisted ledger layout.

Invariants:
    - All models inherit from Base (db/base.py)
    - Layout mirrors LedgerState: one campaign row, projects, investments

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
"""

from seedchain.models.campaign import Campaign  # noqa: F401
from seedchain.models.project import Project  # noqa: F401
from seedchain.models.investment import Investment  # noqa: F401
