"""Replenishment Rules - clamp policy and amount checks for escrow refills.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - balance >= requested: transfer exactly the requested amount
    - balance < requested: transfer balance - fee_reserve (best effort, never fails here)
    - A clamped amount <= 0 is never submitted: check_transfer_amount raises first

Design Decisions:
    - Clamp returns a decision object instead of a bare Decimal: the service logs
      and audits whether the clamp fired without recomputing it
    - Zero/negative clamp fails closed with InsufficientFundsError rather than
      submitting a transfer the ledger would reject anyway
"""

from dataclasses import dataclass
from decimal import Decimal

from backstop.core.errors import (
    ErrorContext, InsufficientFundsError, InvalidAmountError,
)


@dataclass(frozen=True)
class ClampDecision:
    """Outcome of the clamp policy for one replenishment."""
    requested: Decimal
    balance: Decimal
    amount: Decimal
    clamped: bool


def validate_requested_amount(
    amount: Decimal, context: ErrorContext | None = None,
) -> None:
    """Requested refills must be strictly positive."""
    if amount <= 0:
        raise InvalidAmountError(
            f"Replenishment amount must be positive, got {amount}",
            amount, context,
        )


def clamp_transfer_amount(
    balance: Decimal, requested: Decimal, fee_reserve: Decimal,
) -> ClampDecision:
    """Reduce the transfer to what the wallet can pay after the fee reserve."""
    if balance < requested:
        return ClampDecision(
            requested=requested,
            balance=balance,
            amount=balance - fee_reserve,
            clamped=True,
        )
    return ClampDecision(
        requested=requested, balance=balance, amount=requested, clamped=False,
    )


def check_transfer_amount(
    decision: ClampDecision, fee_reserve: Decimal,
    context: ErrorContext | None = None,
) -> None:
    """Raise InsufficientFundsError when nothing is left to send."""
    if decision.amount <= 0:
        raise InsufficientFundsError(decision.balance, fee_reserve, context)
