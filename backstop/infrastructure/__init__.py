"""Infrastructure Layer - external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure depends on core/ only for error types, domain types and protocols
    - Every third-party exception is mapped to the typed hierarchy in core/errors.py

Design Decisions:
    - Thin adapters over raw clients: ledger, vault, oracle and persistence can each be
      replaced by a fake in tests without touching the services
"""
