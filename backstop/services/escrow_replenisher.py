"""Escrow Replenisher - moves guarantor funds into a project's escrow account.

Invariants:
    - Order is fixed: role -> amount -> issuer -> project -> balance -> clamp -> decrypt
      -> submit -> record
    - An issued asset resolves its issuer (explicit or platform) before any ledger call;
      the balance is read from that issuer's trustline
    - Nothing is decrypted or submitted once any earlier step has failed
    - Balance read and submission happen under one per-wallet lock: two refills from the
      same wallet in this process never clamp against the same pre-transfer balance
    - A submitted transfer is never retried here; the caller re-invokes if it wants to
    - Native and issued assets share one code path (AssetSelector)

Design Decisions:
    - Audit failure after a successful submit is logged, not raised: the transfer is final
      on the ledger, and raising would invite the caller to pay twice
    - Per-wallet asyncio.Lock lives in a process-wide registry; it does not serialize
      across processes, which remains a documented gap
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal

from backstop.core.domain_types import (
    GUARANTOR_REFUND_MEMO, AssetSelector, CustomAsset, NativeAsset, Role,
    TransferReceipt, TxHash,
)
from backstop.core.enforce_replenishment import (
    ClampDecision, check_transfer_amount, clamp_transfer_amount,
    validate_requested_amount,
)
from backstop.core.enforce_roles import require_role
from backstop.core.errors import (
    AssetConfigurationError, BackstopError, DatabaseError, ErrorContext,
    NotFoundError,
)
from backstop.core.repository_protocols import (
    AuditRepository, CredentialVault, EntityLike, LedgerClient,
    ProjectLike, ProjectRepository,
)

logger = logging.getLogger(__name__)


class WalletLockRegistry:
    """One asyncio.Lock per wallet public key, created on first use."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}

    def lock_for(self, public_key: str) -> asyncio.Lock:
        lock = self._locks.get(public_key)
        if lock is None:
            lock = self._locks[public_key] = asyncio.Lock()
        return lock


# Process-wide registry shared by every replenisher built by build_services
wallet_locks = WalletLockRegistry()


@dataclass(frozen=True)
class ReplenishmentReceipt:
    """Outcome of an accepted refill."""
    tx_hash: TxHash
    ledger: int
    asset_code: str
    requested_amount: Decimal
    submitted_amount: Decimal
    clamped: bool
    audit_recorded: bool = True


class EscrowReplenisher:
    """Guarantor-driven escrow refills with best-effort clamping."""

    def __init__(
        self,
        projects: ProjectRepository,
        ledger: LedgerClient,
        vault: CredentialVault,
        audit: AuditRepository,
        stablecoin_issuer: str,
        fee_reserve: Decimal = Decimal("1"),
        locks: WalletLockRegistry | None = None,
    ):
        self.projects = projects
        self.ledger = ledger
        self.vault = vault
        self.audit = audit
        self.stablecoin_issuer = stablecoin_issuer
        self.fee_reserve = fee_reserve
        self.locks = locks or wallet_locks

    async def replenish_with_asset(
        self, entity: EntityLike, project_index: int, asset_code: str,
        amount: Decimal, passphrase: str,
    ) -> ReplenishmentReceipt:
        return await self.replenish_escrow(
            entity, project_index, CustomAsset(asset_code), amount, passphrase,
        )

    async def replenish_with_native(
        self, entity: EntityLike, project_index: int,
        amount: Decimal, passphrase: str,
    ) -> ReplenishmentReceipt:
        return await self.replenish_escrow(
            entity, project_index, NativeAsset(), amount, passphrase,
        )

    async def replenish_escrow(
        self,
        entity: EntityLike,
        project_index: int,
        asset: AssetSelector,
        amount: Decimal,
        passphrase: str,
    ) -> ReplenishmentReceipt:
        """Refill a project's escrow from the guarantor's wallet."""
        context = ErrorContext(
            operation="replenish_escrow",
            entity_index=entity.index,
            project_index=project_index,
            asset_code=asset.code,
        )
        require_role(entity, Role.GUARANTOR, context)
        validate_requested_amount(amount, context)
        issuer = self._issuer_for(asset, context)

        project = await self.projects.get(project_index)
        if project is None:
            raise NotFoundError("Project", project_index, context)

        try:
            async with self.locks.lock_for(entity.public_key):
                decision = await self._clamp(entity, asset, issuer, amount, context)
                # scrypt blocks; run it in a worker thread
                signing_secret = await asyncio.to_thread(
                    self.vault.decrypt_seed, entity.encrypted_seed, passphrase,
                )
                receipt = await self._submit(
                    asset, issuer, project, decision.amount, signing_secret,
                )
        except BackstopError as e:
            # Collaborator errors arrive without request context
            if e.context.operation is None:
                e.context = context
            raise

        logger.info(
            f"Escrow replenished for project {project_index}",
            extra={
                "entity_index": entity.index,
                "project_index": project_index,
                "asset_code": asset.code,
                "submitted_amount": decision.amount,
                "tx_hash": receipt.tx_hash,
            },
        )
        audit_recorded = await self._record(entity, project_index, asset, decision, receipt)
        return ReplenishmentReceipt(
            tx_hash=receipt.tx_hash,
            ledger=receipt.ledger,
            asset_code=asset.code,
            requested_amount=decision.requested,
            submitted_amount=decision.amount,
            clamped=decision.clamped,
            audit_recorded=audit_recorded,
        )

    def _issuer_for(
        self, asset: AssetSelector, context: ErrorContext,
    ) -> str | None:
        if isinstance(asset, NativeAsset):
            return None
        issuer = asset.issuer or self.stablecoin_issuer
        if not issuer:
            raise AssetConfigurationError(asset.code, context)
        return issuer

    async def _balance(
        self, public_key: str, asset: AssetSelector, issuer: str | None,
    ) -> Decimal:
        if isinstance(asset, NativeAsset):
            return await self.ledger.get_native_balance(public_key)
        return await self.ledger.get_asset_balance(public_key, asset.code, issuer)

    async def _clamp(
        self, entity: EntityLike, asset: AssetSelector, issuer: str | None,
        amount: Decimal, context: ErrorContext,
    ) -> ClampDecision:
        balance = await self._balance(entity.public_key, asset, issuer)
        decision = clamp_transfer_amount(balance, amount, self.fee_reserve)
        if decision.clamped:
            logger.warning(
                "Guarantor balance below requested amount, refilling what is available",
                extra={
                    "entity_index": entity.index,
                    "requested_amount": amount,
                    "submitted_amount": decision.amount,
                },
            )
        check_transfer_amount(decision, self.fee_reserve, context)
        return decision

    async def _submit(
        self, asset: AssetSelector, issuer: str | None, project: ProjectLike,
        amount: Decimal, signing_secret: str,
    ) -> TransferReceipt:
        if isinstance(asset, NativeAsset):
            return await self.ledger.send_native(
                project.escrow_pubkey, amount, signing_secret,
                GUARANTOR_REFUND_MEMO,
            )
        return await self.ledger.send_asset(
            asset.code,
            issuer,
            project.escrow_pubkey,
            amount,
            signing_secret,
            GUARANTOR_REFUND_MEMO,
        )

    async def _record(
        self, entity: EntityLike, project_index: int, asset: AssetSelector,
        decision: ClampDecision, receipt: TransferReceipt,
    ) -> bool:
        try:
            await self.audit.record_replenishment(
                entity_index=entity.index,
                project_index=project_index,
                asset_code=asset.code,
                requested_amount=decision.requested,
                submitted_amount=decision.amount,
                clamped=decision.clamped,
                receipt=receipt,
            )
        except DatabaseError as e:
            logger.error(
                f"Transfer submitted but audit entry not saved: {e.message}",
                extra={"tx_hash": receipt.tx_hash, "error_code": e.code},
            )
            return False
        return True
