"""Composition Root - wires settings, adapters and services into one dispatchable engine.

Invariants:
    - startup() runs once per process: logging configured, database pool created
    - build_services() is cheap and runs once per unit of work (one AsyncSession)
    - run_operation() is one unit of work: open session, load actor, dispatch, close
    - All replenishers share the process-wide wallet lock registry
    - Collaborators can be overridden (tests, alternate ledgers) without touching services

Design Decisions:
    - Explicit wiring, no container framework: every dependency visible in one function
    - Long-lived adapters (ledger client, vault, oracle) built once in startup() and
      reused; repositories are bound to the caller's session
"""

import logging
from dataclasses import dataclass
from typing import Literal

from cryptography.fernet import Fernet
from sqlalchemy.ext.asyncio import AsyncSession

from backstop.config import Settings, get_settings
from backstop.core.errors import DatabaseError, ErrorContext, NotFoundError
from backstop.core.repository_protocols import (
    CredentialVault, LedgerClient, PriceOracle,
)
from backstop.infrastructure.credential_vault import ScryptCredentialVault
from backstop.infrastructure.database import get_db_manager, init_db
from backstop.infrastructure.ledger_client import StellarLedgerClient
from backstop.infrastructure.observability import setup_logging
from backstop.infrastructure.price_oracle import TickerPriceOracle
from backstop.infrastructure.repositories import (
    SqlAuditRepository, SqlEntityRepository, SqlInvestorRepository,
    SqlProjectRepository,
)
from backstop.services.escrow_replenisher import EscrowReplenisher, wallet_locks
from backstop.services.guarantor_capability import GuarantorCapability
from backstop.services.investor_admission import InvestorAdmission
from backstop.services.investor_profile import InvestorProfile
from backstop.services.operation_dispatch import OperationDispatch
from backstop.services.voting_ledger import VotingLedger

logger = logging.getLogger(__name__)


@dataclass
class Collaborators:
    """Long-lived external adapters shared across units of work."""
    ledger: LedgerClient
    vault: CredentialVault
    oracle: PriceOracle


@dataclass
class BackstopServices:
    """Everything the RPC boundary needs for one unit of work."""
    guarantor: GuarantorCapability
    replenisher: EscrowReplenisher
    admission: InvestorAdmission
    voting: VotingLedger
    profile: InvestorProfile
    dispatch: OperationDispatch
    entities: SqlEntityRepository
    investors: SqlInvestorRepository


def build_collaborators(settings: Settings) -> Collaborators:
    """Create the ledger client, credential vault and price oracle from settings."""
    master_key = settings.credential_vault_key
    if not master_key:
        logger.warning(
            "CREDENTIAL_VAULT_KEY not set; using an ephemeral key, "
            "credential handles will not survive a restart",
        )
        master_key = Fernet.generate_key()
    return Collaborators(
        ledger=StellarLedgerClient(
            settings.horizon_url,
            network_mode=settings.network_mode,
            base_fee=settings.ledger_base_fee,
            timeout_seconds=settings.ledger_timeout_seconds,
        ),
        vault=ScryptCredentialVault(
            master_key,
            scrypt_n=settings.scrypt_n,
            scrypt_r=settings.scrypt_r,
            scrypt_p=settings.scrypt_p,
        ),
        oracle=TickerPriceOracle(
            settings.oracle_ticker_urls,
            timeout_seconds=settings.oracle_timeout_seconds,
        ),
    )


def startup(settings: Settings | None = None) -> Collaborators:
    """Process startup: logging, database pool, shared adapters."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info(
        f"Backstop engine started on {settings.network_mode.value} network",
    )
    if not settings.stablecoin_issuer:
        logger.warning(
            "STABLECOIN_ISSUER not set; refills with the platform stablecoin will be rejected",
        )
    return build_collaborators(settings)


def build_services(
    db: AsyncSession,
    collaborators: Collaborators,
    settings: Settings | None = None,
) -> BackstopServices:
    """Bind services to one database session."""
    settings = settings or get_settings()
    entities = SqlEntityRepository(db)
    investors = SqlInvestorRepository(db)

    guarantor = GuarantorCapability(entities, collaborators.vault)
    replenisher = EscrowReplenisher(
        SqlProjectRepository(db),
        collaborators.ledger,
        collaborators.vault,
        SqlAuditRepository(db),
        stablecoin_issuer=settings.stablecoin_issuer,
        fee_reserve=settings.fee_reserve,
        locks=wallet_locks,
    )
    admission = InvestorAdmission(
        collaborators.ledger,
        collaborators.oracle,
        settings.network_mode,
        sandbox_stablecoin_code=settings.sandbox_stablecoin_code,
        production_stablecoin_code=settings.production_stablecoin_code,
    )
    voting = VotingLedger(investors)
    profile = InvestorProfile(investors)
    return BackstopServices(
        guarantor=guarantor,
        replenisher=replenisher,
        admission=admission,
        voting=voting,
        profile=profile,
        dispatch=OperationDispatch(guarantor, replenisher, admission, voting, profile),
        entities=entities,
        investors=investors,
    )


async def run_operation(
    collaborators: Collaborators,
    operation: str,
    actor_kind: Literal["entity", "investor"],
    actor_index: int,
    payload: dict,
    settings: Settings | None = None,
) -> dict:
    """Run one operation for an authenticated actor in its own session.

    Returns the dispatch result dict. Never raises for domain or database failures.
    """
    try:
        async with get_db_manager().session() as db:
            services = build_services(db, collaborators, settings)
            repository = (
                services.entities if actor_kind == "entity" else services.investors
            )
            actor = await repository.get(actor_index)
            if actor is None:
                context = ErrorContext(operation=operation)
                if actor_kind == "entity":
                    context.entity_index = actor_index
                else:
                    context.investor_index = actor_index
                return NotFoundError(
                    actor_kind.capitalize(), actor_index, context,
                ).to_response()
            return await services.dispatch.execute(operation, actor, payload)
    except DatabaseError as e:
        logger.error(
            f"{operation} aborted: {e.message}",
            extra={"error_code": e.code, "operation": operation},
        )
        e.context.operation = operation
        return e.to_response()
