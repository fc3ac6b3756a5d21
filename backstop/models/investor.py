"""Investor ORM - persists investors, their voting weight and investment record.

Invariants:
    - voting_balance >= 0 (enforced by services/voting_ledger.py, never assigned directly)
    - amount_invested == -1 means "never invested"
    - invested_projects and invested_project_indices are ordered and grow together
    - company is an inert attestation record; is_company flags whether it applies

Design Decisions:
    - JSON columns for the ordered sequences and the company profile: read and
      written whole, never queried by element
    - Sequences are reassigned, not mutated in place: plain JSON columns do not
      track in-place appends
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, String, Text, Integer, Numeric, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from backstop.core.domain_types import NEVER_INVESTED, Role
from backstop.db.base import Base


class Investor(Base):
    """Investor record - funds projects and votes with its balance."""
    __tablename__ = "investors"

    index: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Role.INVESTOR.value,
    )
    legal: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    public_key: Mapped[str] = mapped_column(String(56), nullable=False)
    encrypted_seed: Mapped[str] = mapped_column(Text, nullable=False)
    voting_balance: Mapped[Decimal] = mapped_column(
        Numeric(20, 7), nullable=False, default=Decimal("0"),
    )
    amount_invested: Mapped[Decimal] = mapped_column(
        Numeric(20, 7), nullable=False, default=NEVER_INVESTED,
    )
    invested_projects: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    invested_project_indices: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    is_company: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    company: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"Investor(index={self.index!r}, name={self.name!r})"
