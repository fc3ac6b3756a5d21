"""Investor Ledger Rules - voting-balance floor and invested-amount accumulation.

Invariants:
    - All functions are PURE
    - Voting balance after any delta is max(0, previous + delta); no upper bound
    - amount_invested == NEVER_INVESTED until the first recorded investment
"""

from decimal import Decimal

from backstop.core.domain_types import NEVER_INVESTED


def apply_voting_delta(balance: Decimal, delta: Decimal) -> Decimal:
    """Add delta and floor the result at zero."""
    result = balance + delta
    if result < 0:
        return Decimal("0")
    return result


def accumulate_invested(current: Decimal, amount: Decimal) -> Decimal:
    """Add an investment to the running total, replacing the sentinel on first use."""
    if current == NEVER_INVESTED:
        return amount
    return current + amount
