"""ORM Models - SQLAlchemy declarative models for all persisted records.

Invariants:
    - All models inherit from Base (db/base.py)
    - Records are addressed by integer index, matching the RPC boundary

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
      or alembic autogenerate runs
"""

from backstop.models.entity import Entity  # noqa: F401
from backstop.models.investor import Investor  # noqa: F401
from backstop.models.project import Project  # noqa: F401
from backstop.models.replenishment_audit import ReplenishmentAudit  # noqa: F401
