"""Composition Root - wiring of collaborators and services."""

from decimal import Decimal

import pytest
from cryptography.fernet import Fernet
from sqlalchemy.exc import OperationalError

from backstop.config import Settings
from backstop.core.domain_types import NEVER_INVESTED, NetworkMode, Role
from backstop.db.base import Base
from backstop.infrastructure import database
from backstop.infrastructure.credential_vault import ScryptCredentialVault
from backstop.infrastructure.ledger_client import StellarLedgerClient
from backstop.infrastructure.price_oracle import TickerPriceOracle
from backstop.main import (
    Collaborators, build_collaborators, build_services, run_operation,
)
from backstop.models.entity import Entity
from backstop.models.investor import Investor
from backstop.models.project import Project
from backstop.services.escrow_replenisher import wallet_locks

from tests.services.fakes import FakeLedgerClient, FakePriceOracle, FakeVault


def _settings(**overrides) -> Settings:
    values = {
        "credential_vault_key": Fernet.generate_key().decode(),
        "horizon_url": "http://horizon.invalid",
        "stablecoin_issuer": "GSTABLEISSUER",
        "network_mode": NetworkMode.PRODUCTION,
        "fee_reserve": Decimal("2"),
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_build_collaborators_uses_real_adapters():
    collaborators = build_collaborators(_settings())

    assert isinstance(collaborators.ledger, StellarLedgerClient)
    assert isinstance(collaborators.vault, ScryptCredentialVault)
    assert isinstance(collaborators.oracle, TickerPriceOracle)


def test_missing_vault_key_falls_back_to_ephemeral_key():
    collaborators = build_collaborators(_settings(credential_vault_key=""))

    handle = collaborators.vault.seal_credential("pledge")
    assert collaborators.vault.open_credential(handle) == "pledge"


async def test_build_services_applies_settings(test_db):
    collaborators = Collaborators(FakeLedgerClient(), FakeVault(), FakePriceOracle())

    services = build_services(test_db, collaborators, _settings())

    assert services.replenisher.fee_reserve == Decimal("2")
    assert services.replenisher.stablecoin_issuer == "GSTABLEISSUER"
    assert services.replenisher.locks is wallet_locks
    assert services.admission.stablecoin_code == "USD"
    assert "replenish_escrow" in services.dispatch.operations


async def test_built_dispatch_runs_end_to_end(test_db, guarantor, project):
    ledger = FakeLedgerClient()
    ledger.set_balance("GGUARANTOR", "STABLEUSD", 30)
    services = build_services(
        test_db,
        Collaborators(ledger, FakeVault(), FakePriceOracle()),
        _settings(fee_reserve=Decimal("1")),
    )

    result = await services.dispatch.execute("replenish_escrow", guarantor, {
        "project_index": project.index,
        "amount": "1000",
        "asset_code": "STABLEUSD",
        "passphrase": "correct horse",
    })

    assert result["status"] == "ok"
    assert result["submitted_amount"] == "29"


# ─── run_operation ───────────────────────────────────────────────

@pytest.fixture
async def file_db(tmp_path, monkeypatch):
    """Initialized db_manager on a file database seeded with one of each record."""
    monkeypatch.setattr(database, "db_manager", None)
    manager = database.init_db(f"sqlite+aiosqlite:///{tmp_path / 'backstop.db'}")
    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with manager.session() as db:
        db.add_all([
            Entity(
                index=1, name="Sunrise Guarantee Fund", role=Role.GUARANTOR.value,
                public_key="GGUARANTOR", encrypted_seed="sealed",
            ),
            Project(index=1, escrow_pubkey="GESCROW", stage=3),
            Investor(
                index=1, name="Ada Investor", legal=True, public_key="GINVESTOR",
                encrypted_seed="sealed", voting_balance=Decimal("10"),
                amount_invested=NEVER_INVESTED,
            ),
        ])
        await db.commit()
    yield manager
    await manager.dispose()


async def test_run_operation_loads_entity_actor_and_dispatches(file_db):
    ledger = FakeLedgerClient()
    ledger.set_balance("GGUARANTOR", "STABLEUSD", 30)
    collaborators = Collaborators(ledger, FakeVault(), FakePriceOracle())

    result = await run_operation(
        collaborators, "replenish_escrow", "entity", 1, {
            "project_index": 1,
            "amount": "1000",
            "asset_code": "STABLEUSD",
            "passphrase": "correct horse",
        }, _settings(fee_reserve=Decimal("1")),
    )

    assert result["status"] == "ok"
    assert result["submitted_amount"] == "29"
    assert ledger.sent[0]["destination"] == "GESCROW"


async def test_run_operation_persists_investor_changes(file_db):
    collaborators = Collaborators(FakeLedgerClient(), FakeVault(), FakePriceOracle())

    result = await run_operation(
        collaborators, "adjust_voting_balance", "investor", 1, {"delta": "-4"},
        _settings(),
    )

    assert result["status"] == "ok"
    assert Decimal(result["voting_balance"]) == Decimal("6")
    async with file_db.session() as db:
        stored = await db.get(Investor, 1)
        assert stored.voting_balance == Decimal("6")


async def test_run_operation_unknown_actor(file_db):
    collaborators = Collaborators(FakeLedgerClient(), FakeVault(), FakePriceOracle())

    result = await run_operation(
        collaborators, "can_invest", "investor", 99, {"target_amount": "1"},
        _settings(),
    )

    assert result["error"]["code"] == "RESOURCE_NOT_FOUND"
    assert result["error"]["context"]["investor_index"] == 99
    assert result["error"]["context"]["operation"] == "can_invest"


async def test_run_operation_maps_database_failure(file_db, monkeypatch):
    async def _broken_get(self, index):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(
        "backstop.infrastructure.repositories.SqlEntityRepository.get", _broken_get,
    )
    collaborators = Collaborators(FakeLedgerClient(), FakeVault(), FakePriceOracle())

    result = await run_operation(
        collaborators, "replenish_escrow", "entity", 1, {}, _settings(),
    )

    assert result["status"] == "error"
    assert result["error"]["code"] == "DATABASE_ERROR"
    assert result["error"]["retryable"] is True
    assert result["error"]["context"]["operation"] == "replenish_escrow"
