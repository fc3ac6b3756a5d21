"""Guarantor Capability - records a guarantor's first-loss pledge.

Invariants:
    - Only Role.GUARANTOR may register; anyone else fails before any field is touched
    - Negative pledge amounts are rejected before any field is touched
    - The credential handle must resolve through the vault; the resolved secret is discarded
    - Registering the same (handle, amount) twice leaves the same persisted state as once
"""

import logging
from decimal import Decimal

from backstop.core.domain_types import CredentialHandle, Role
from backstop.core.enforce_roles import require_role
from backstop.core.errors import CredentialError, ErrorContext, InvalidAmountError
from backstop.core.repository_protocols import (
    CredentialVault, EntityLike, EntityRepository,
)

logger = logging.getLogger(__name__)


class GuarantorCapability:
    """First-loss guarantee registration for guarantor entities."""

    def __init__(self, entities: EntityRepository, vault: CredentialVault):
        self.entities = entities
        self.vault = vault

    async def register_first_loss_guarantee(
        self,
        entity: EntityLike,
        credential_handle: CredentialHandle,
        amount: Decimal,
    ) -> None:
        context = ErrorContext(
            operation="register_first_loss_guarantee",
            entity_index=entity.index,
        )
        require_role(entity, Role.GUARANTOR, context)
        if amount < 0:
            raise InvalidAmountError(
                f"First-loss guarantee cannot be negative, got {amount}",
                amount, context,
            )

        # Resolve once to prove the handle is usable; never keep the result
        try:
            self.vault.open_credential(credential_handle)
        except CredentialError as e:
            e.context = context
            raise

        entity.first_loss_guarantee = credential_handle
        entity.first_loss_guarantee_amt = amount
        await self.entities.save(entity)
        logger.info(
            "First-loss guarantee registered",
            extra={"entity_index": entity.index, "requested_amount": amount},
        )
