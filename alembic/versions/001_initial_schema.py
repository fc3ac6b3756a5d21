"""Initial schema - entities, investors, projects, replenishment_audits.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "entities",
        sa.Column("index", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="entity"),
        sa.Column("first_loss_guarantee", sa.Text, nullable=True),
        sa.Column("first_loss_guarantee_amt", sa.Numeric(20, 7), nullable=False, server_default="0"),
        sa.Column("public_key", sa.String(56), nullable=False),
        sa.Column("encrypted_seed", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "investors",
        sa.Column("index", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="investor"),
        sa.Column("legal", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("public_key", sa.String(56), nullable=False),
        sa.Column("encrypted_seed", sa.Text, nullable=False),
        sa.Column("voting_balance", sa.Numeric(20, 7), nullable=False, server_default="0"),
        sa.Column("amount_invested", sa.Numeric(20, 7), nullable=False, server_default="-1"),
        sa.Column("invested_projects", sa.JSON, nullable=False),
        sa.Column("invested_project_indices", sa.JSON, nullable=False),
        sa.Column("is_company", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("company", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "projects",
        sa.Column("index", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("escrow_pubkey", sa.String(56), nullable=False),
        sa.Column("stage", sa.Integer, nullable=False, server_default="0"),
    )

    op.create_table(
        "replenishment_audits",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("entity_index", sa.Integer, nullable=False),
        sa.Column("project_index", sa.Integer, nullable=False),
        sa.Column("asset_code", sa.String(12), nullable=False),
        sa.Column("requested_amount", sa.Numeric(20, 7), nullable=False),
        sa.Column("submitted_amount", sa.Numeric(20, 7), nullable=False),
        sa.Column("clamped", sa.Boolean, nullable=False),
        sa.Column("tx_hash", sa.String(64), nullable=False),
        sa.Column("ledger", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_replenishment_audits_tx_hash", "replenishment_audits", ["tx_hash"],
    )


def downgrade() -> None:
    op.drop_index("ix_replenishment_audits_tx_hash", "replenishment_audits")
    op.drop_table("replenishment_audits")
    op.drop_table("projects")
    op.drop_table("investors")
    op.drop_table("entities")
