"""Voting Ledger - the only writer of an investor's voting balance.

Invariants:
    - voting_balance after every adjustment is max(0, previous + delta)
    - The investor is saved on every call, floored or not
    - No upper bound is enforced
"""

import logging
from decimal import Decimal

from backstop.core.enforce_investor_ledger import apply_voting_delta
from backstop.core.repository_protocols import InvestorLike, InvestorRepository

logger = logging.getLogger(__name__)


class VotingLedger:
    """Voting-balance adjustments, e.g. refunds when an order is finalized or cancelled."""

    def __init__(self, investors: InvestorRepository):
        self.investors = investors

    async def adjust_voting_balance(
        self, investor: InvestorLike, delta: Decimal,
    ) -> Decimal:
        previous = investor.voting_balance
        investor.voting_balance = apply_voting_delta(previous, delta)
        if previous + delta < 0:
            logger.info(
                "Voting balance floored at zero",
                extra={"investor_index": investor.index},
            )
        await self.investors.save(investor)
        return investor.voting_balance
