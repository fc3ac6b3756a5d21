"""ReplenishmentAudit ORM - logging table for escrow refills submitted by guarantors.

Invariants:
    - One row per transfer the ledger accepted; rejected submissions are not recorded
    - tx_hash is the ledger's transaction identifier, usable for reconciliation

Design Decisions:
    - Logging table, not enforcement: no business rule reads it back
    - No FK to projects/entities: the audit row must survive whatever those tables do
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, String, Integer, Numeric, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from backstop.db.base import Base


class ReplenishmentAudit(Base):
    """Audit entry - one accepted guarantor refund."""
    __tablename__ = "replenishment_audits"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    entity_index: Mapped[int] = mapped_column(Integer, nullable=False)
    project_index: Mapped[int] = mapped_column(Integer, nullable=False)
    asset_code: Mapped[str] = mapped_column(String(12), nullable=False)
    requested_amount: Mapped[Decimal] = mapped_column(
        Numeric(20, 7), nullable=False,
    )
    submitted_amount: Mapped[Decimal] = mapped_column(
        Numeric(20, 7), nullable=False,
    )
    clamped: Mapped[bool] = mapped_column(Boolean, nullable=False)
    tx_hash: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True,
    )
    ledger: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
