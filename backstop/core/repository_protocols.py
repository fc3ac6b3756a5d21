"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All IO (ledger, vault, oracle, persistence) accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Collaborators raise the typed errors of core/errors.py, never third-party exceptions

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: boundary methods are async because implementations do IO,
      but the pure rules that consume their results are never async themselves;
      the services orchestrate the async calls around the pure logic
"""

from decimal import Decimal
from typing import Protocol

from backstop.core.domain_types import (
    CredentialHandle, Role, TransferReceipt,
)


# ─── Record shapes ───────────────────────────────────────────────

class EntityLike(Protocol):
    """Structural contract for Entity records passed to services.

    Avoids coupling services to the ORM model while giving mypy
    real type information (unlike Any).
    """
    index: int
    role: Role
    first_loss_guarantee: str | None
    first_loss_guarantee_amt: Decimal
    public_key: str
    encrypted_seed: str


class InvestorLike(Protocol):
    """Structural contract for Investor records passed to services."""
    index: int
    legal: bool
    public_key: str
    voting_balance: Decimal
    amount_invested: Decimal
    invested_projects: list
    invested_project_indices: list
    is_company: bool
    company: dict | None


class ProjectLike(Protocol):
    """Read-only view of a Project; lifecycle is owned elsewhere."""
    index: int
    escrow_pubkey: str
    stage: int


# ─── Persistence ─────────────────────────────────────────────────

class EntityRepository(Protocol):
    """Contract for entity persistence - implemented by shell."""
    async def get(self, index: int) -> EntityLike | None: ...
    async def save(self, entity: EntityLike) -> None: ...


class InvestorRepository(Protocol):
    """Contract for investor persistence - implemented by shell."""
    async def get(self, index: int) -> InvestorLike | None: ...
    async def save(self, investor: InvestorLike) -> None: ...


class ProjectRepository(Protocol):
    """Contract for project lookup - implemented by shell."""
    async def get(self, index: int) -> ProjectLike | None: ...


class AuditRepository(Protocol):
    """Contract for the replenishment audit trail - implemented by shell."""
    async def record_replenishment(
        self,
        *,
        entity_index: int,
        project_index: int,
        asset_code: str,
        requested_amount: Decimal,
        submitted_amount: Decimal,
        clamped: bool,
        receipt: TransferReceipt,
    ) -> None: ...


# ─── External collaborators ──────────────────────────────────────

class LedgerClient(Protocol):
    """Balance queries and signed transfers on the external ledger."""
    async def get_asset_balance(
        self, public_key: str, asset_code: str, issuer_key: str | None = None,
    ) -> Decimal: ...
    async def get_native_balance(self, public_key: str) -> Decimal: ...
    async def send_asset(
        self,
        asset_code: str,
        issuer_key: str,
        destination_key: str,
        amount: Decimal,
        signing_secret: str,
        memo: str,
    ) -> TransferReceipt: ...
    async def send_native(
        self,
        destination_key: str,
        amount: Decimal,
        signing_secret: str,
        memo: str,
    ) -> TransferReceipt: ...


class CredentialVault(Protocol):
    """Turns encrypted material into usable secrets at the moment of use.

    Synchronous: decrypt_seed runs a slow KDF, async callers use asyncio.to_thread.
    """
    def decrypt_seed(self, encrypted_seed: str, passphrase: str) -> str: ...
    def open_credential(self, handle: CredentialHandle) -> str: ...


class PriceOracle(Protocol):
    """Estimates the stable-asset value of a native-currency amount."""
    async def exchange_native_for_stable(self, native_amount: Decimal) -> Decimal: ...
