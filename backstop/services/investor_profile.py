"""Investor Profile - company attestation and the investment record of an investor.

Invariants:
    - amount_invested moves only through record_investment; the -1 sentinel is
      replaced by the first investment, later ones accumulate
    - invested_projects and invested_project_indices grow together, in order
    - Sequences are reassigned, never appended in place (JSON columns track assignment)
    - Every mutation is saved before returning
"""

import logging
from decimal import Decimal

from backstop.core.enforce_investor_ledger import accumulate_invested
from backstop.core.errors import ErrorContext, InvalidAmountError
from backstop.core.repository_protocols import InvestorLike, InvestorRepository
from backstop.schemas.company import CompanyDetails

logger = logging.getLogger(__name__)


class InvestorProfile:
    """Company details and investment bookkeeping for investors."""

    def __init__(self, investors: InvestorRepository):
        self.investors = investors

    async def mark_as_company(self, investor: InvestorLike) -> None:
        investor.is_company = True
        await self.investors.save(investor)

    async def set_company_details(
        self, investor: InvestorLike, details: CompanyDetails,
    ) -> None:
        investor.company = details.model_dump()
        await self.investors.save(investor)
        logger.info(
            "Company details updated", extra={"investor_index": investor.index},
        )

    async def record_investment(
        self,
        investor: InvestorLike,
        project_asset: str,
        project_index: int,
        amount: Decimal,
    ) -> Decimal:
        """Append the project to the investor's record and add amount to the total."""
        if amount <= 0:
            raise InvalidAmountError(
                f"Investment amount must be positive, got {amount}", amount,
                ErrorContext(operation="record_investment", investor_index=investor.index),
            )
        investor.invested_projects = [*investor.invested_projects, project_asset]
        investor.invested_project_indices = [
            *investor.invested_project_indices, project_index,
        ]
        investor.amount_invested = accumulate_invested(investor.amount_invested, amount)
        await self.investors.save(investor)
        return investor.amount_invested
