"""Entity ORM - persists platform entities, the only records that can act as guarantors.

Invariants:
    - index is the integer key the RPC boundary and repositories address records by
    - role is one of Role; the guarantor capability is role == "guarantor"
    - first_loss_guarantee holds an opaque credential handle, never a plaintext secret
    - first_loss_guarantee_amt is only meaningful when role == "guarantor"

Design Decisions:
    - Wallet columns inlined (public_key, encrypted_seed): one wallet per entity,
      no JOIN to sign a transfer
    - Numeric(20, 7): ledger amounts carry 7 decimal places
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Text, Integer, Numeric, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from backstop.core.domain_types import Role
from backstop.db.base import Base


class Entity(Base):
    """Entity record - developer, contractor or guarantor."""
    __tablename__ = "entities"

    index: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Role.ENTITY.value,
    )
    first_loss_guarantee: Mapped[str | None] = mapped_column(
        Text, nullable=True,
    )
    first_loss_guarantee_amt: Mapped[Decimal] = mapped_column(
        Numeric(20, 7), nullable=False, default=Decimal("0"),
    )
    public_key: Mapped[str] = mapped_column(String(56), nullable=False)
    encrypted_seed: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        # secrets omitted
        return f"Entity(index={self.index!r}, name={self.name!r}, role={self.role!r})"
