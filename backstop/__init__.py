"""Backstop - guarantee and escrow-replenishment engine for solar project funding.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
