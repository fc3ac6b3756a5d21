"""Investor Admission Control - gates investment orders on live purchasing power.

Invariants:
    - can_invest is read-only: it never mutates or saves the investor
    - legal=False denies without touching the ledger
    - A failed balance query counts as a zero balance for that source only
    - The stablecoin code is fixed at construction from the NetworkMode
"""

import logging
from decimal import Decimal

from backstop.core.domain_types import NetworkMode
from backstop.core.enforce_admission import admission_decision, stablecoin_code_for
from backstop.core.errors import LedgerQueryError
from backstop.core.repository_protocols import (
    InvestorLike, LedgerClient, PriceOracle,
)

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


class InvestorAdmission:
    """Pre-order purchasing-power check."""

    def __init__(
        self,
        ledger: LedgerClient,
        oracle: PriceOracle,
        network_mode: NetworkMode,
        sandbox_stablecoin_code: str = "STABLEUSD",
        production_stablecoin_code: str = "USD",
    ):
        self.ledger = ledger
        self.oracle = oracle
        self.network_mode = network_mode
        self.stablecoin_code = stablecoin_code_for(
            network_mode, sandbox_stablecoin_code, production_stablecoin_code,
        )

    async def _stable_balance(self, public_key: str) -> Decimal:
        try:
            return await self.ledger.get_asset_balance(public_key, self.stablecoin_code)
        except LedgerQueryError as e:
            logger.info(f"Stable balance unavailable, assuming 0: {e.message}")
            return _ZERO

    async def _native_balance(self, public_key: str) -> Decimal:
        try:
            return await self.ledger.get_native_balance(public_key)
        except LedgerQueryError as e:
            logger.info(f"Native balance unavailable, assuming 0: {e.message}")
            return _ZERO

    async def can_invest(self, investor: InvestorLike, target_amount: Decimal) -> bool:
        """True iff the investor accepted the terms and one funding source exceeds target."""
        if not investor.legal:
            logger.info(
                "Investor has not accepted the platform terms",
                extra={"investor_index": investor.index},
            )
            return False

        stable = await self._stable_balance(investor.public_key)
        native = await self._native_balance(investor.public_key)
        native_value = (
            await self.oracle.exchange_native_for_stable(native) if native > 0 else _ZERO
        )
        return admission_decision(investor.legal, stable, native_value, target_amount)
