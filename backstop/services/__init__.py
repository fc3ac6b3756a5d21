"""Services Layer - imperative shell around the pure rules in core/.

Invariants:
    - Services do the IO (ledger, vault, oracle, repositories); core/ decides
    - Operation dispatch uses explicit dict mapping (no auto-discovery)

Design Decisions:
    - One service file per capability for locality (no god objects)
"""
