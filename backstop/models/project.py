"""Project ORM - the slice of a solar project this engine reads.

Invariants:
    - Read-only from this package: stage transitions are owned by the lifecycle service
    - escrow_pubkey is the destination of every guarantor refund
"""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from backstop.db.base import Base


class Project(Base):
    """Project record - escrow account and lifecycle stage."""
    __tablename__ = "projects"

    index: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    escrow_pubkey: Mapped[str] = mapped_column(String(56), nullable=False)
    stage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
