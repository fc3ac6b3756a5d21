"""Core Layer - pure domain rules, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, infrastructure/, models/, or db/
    - All functions are pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell: the clamp, floor and
      admission rules are testable without a ledger or a database
"""
