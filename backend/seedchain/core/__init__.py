"""Core Layer — pure ledger logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic (mutators touch only the state passed in)

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
