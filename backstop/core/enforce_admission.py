"""Admission Rules - decides whether an investor can back an order of a given size.

Invariants:
    - All functions are PURE: balances arrive already fetched (failures already zeroed)
    - legal=False always denies, whatever the balances
    - Either source alone must strictly exceed the target; sources are never summed

Design Decisions:
    - "or" kept over "sum": changing it would silently change who is admitted
    - Stablecoin code chosen from an explicit NetworkMode, not ambient global state
"""

from decimal import Decimal

from backstop.core.domain_types import NetworkMode


def stablecoin_code_for(
    mode: NetworkMode, sandbox_code: str, production_code: str,
) -> str:
    """Asset code queried for the investor's stable balance."""
    if mode == NetworkMode.PRODUCTION:
        return production_code
    return sandbox_code


def admission_decision(
    legal: bool,
    stable_balance: Decimal,
    native_value: Decimal,
    target: Decimal,
) -> bool:
    """True iff terms accepted and one funding source exceeds target."""
    if not legal:
        return False
    return stable_balance > target or native_value > target
