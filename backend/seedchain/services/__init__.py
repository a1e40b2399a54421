"""Services Layer — the ledger service that sequences validate → transfer → apply.

Invariants:
    - Services own locking and collaborator calls; rules live in core/
"""
