"""SQL Repositories - SQLAlchemy implementations of the persistence protocols.

Invariants:
    - get() returns None for unknown indices; raising NotFoundError is the service's call
    - save() commits immediately: every operation persists exactly once, at its end
    - SQLAlchemy failures surface as DatabaseError after rollback

Design Decisions:
    - One AsyncSession shared by the repositories of a unit of work: the caller
      (build_services or a test fixture) owns the session lifecycle
    - session.get() over select(): lookups are by primary key only
"""

import logging
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backstop.core.domain_types import TransferReceipt
from backstop.core.errors import DatabaseError
from backstop.models.entity import Entity
from backstop.models.investor import Investor
from backstop.models.project import Project
from backstop.models.replenishment_audit import ReplenishmentAudit

logger = logging.getLogger(__name__)


async def _commit(db: AsyncSession, record: object, what: str) -> None:
    """Add + commit one record, mapping failures to DatabaseError."""
    try:
        db.add(record)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to save {what}: {e}")
        raise DatabaseError(f"could not save {what}", "commit")


class SqlEntityRepository:
    """Entity persistence backed by the entities table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, index: int) -> Entity | None:
        return await self.db.get(Entity, index)

    async def save(self, entity: Entity) -> None:
        await _commit(self.db, entity, "entity")


class SqlInvestorRepository:
    """Investor persistence backed by the investors table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, index: int) -> Investor | None:
        return await self.db.get(Investor, index)

    async def save(self, investor: Investor) -> None:
        await _commit(self.db, investor, "investor")


class SqlProjectRepository:
    """Read-only project lookup."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, index: int) -> Project | None:
        return await self.db.get(Project, index)


class SqlAuditRepository:
    """Append-only replenishment audit trail."""

    def __init__(self, db: AsyncSession):
        self.db = db

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
    ) -> None:
        await _commit(self.db, ReplenishmentAudit(
            entity_index=entity_index,
            project_index=project_index,
            asset_code=asset_code,
            requested_amount=requested_amount,
            submitted_amount=submitted_amount,
            clamped=clamped,
            tx_hash=receipt.tx_hash,
            ledger=receipt.ledger,
        ), "replenishment audit")
