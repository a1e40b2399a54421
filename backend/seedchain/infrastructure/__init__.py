"""Infrastructure Layer — database, transfer service clients, clock, logging.

Invariants:
    - Implements the Protocols declared in core/ledger_protocols.py
"""
