"""SQL Repositories - persistence against in-memory SQLite."""

from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from backstop.core.domain_types import TransferReceipt, TxHash
from backstop.core.errors import DatabaseError
from backstop.infrastructure.repositories import (
    SqlAuditRepository, SqlEntityRepository, SqlInvestorRepository,
    SqlProjectRepository,
)
from backstop.models.replenishment_audit import ReplenishmentAudit


async def test_get_unknown_index_returns_none(test_db):
    assert await SqlEntityRepository(test_db).get(404) is None
    assert await SqlInvestorRepository(test_db).get(404) is None
    assert await SqlProjectRepository(test_db).get(404) is None


async def test_get_project(test_db, project):
    found = await SqlProjectRepository(test_db).get(project.index)
    assert found.escrow_pubkey == "GESCROW"


async def test_entity_save_persists(test_db, guarantor):
    repo = SqlEntityRepository(test_db)
    guarantor.first_loss_guarantee_amt = Decimal("12.5")

    await repo.save(guarantor)
    await test_db.refresh(guarantor)

    assert guarantor.first_loss_guarantee_amt == Decimal("12.5")


async def test_investor_json_lists_persist_on_reassignment(test_db, investor):
    repo = SqlInvestorRepository(test_db)
    investor.invested_projects = [*investor.invested_projects, "SOLAR1"]

    await repo.save(investor)
    await test_db.refresh(investor)

    assert investor.invested_projects == ["SOLAR1"]


async def test_audit_row_written(test_db):
    await SqlAuditRepository(test_db).record_replenishment(
        entity_index=1,
        project_index=2,
        asset_code="STABLEUSD",
        requested_amount=Decimal("1000"),
        submitted_amount=Decimal("29"),
        clamped=True,
        receipt=TransferReceipt(ledger=5, tx_hash=TxHash("ef" * 32)),
    )

    row = (await test_db.execute(select(ReplenishmentAudit))).scalar_one()
    assert row.tx_hash == "ef" * 32
    assert row.ledger == 5
    assert row.submitted_amount == Decimal("29")
    assert row.id is not None
    assert row.created_at is not None


async def test_commit_failure_becomes_database_error(test_db, guarantor, monkeypatch):
    async def _fail():
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(test_db, "commit", _fail)

    with pytest.raises(DatabaseError) as exc:
        await SqlEntityRepository(test_db).save(guarantor)

    assert exc.value.operation == "commit"
    assert exc.value.retryable
