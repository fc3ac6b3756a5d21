"""Root conftest - shared test configuration and database fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Tests never talk to a real ledger, vault key store or price ticker
"""

import os
from decimal import Decimal

import pytest
from cryptography.fernet import Fernet
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

# Ensure tests don't accidentally use real infrastructure
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("CREDENTIAL_VAULT_KEY", Fernet.generate_key().decode())
os.environ.setdefault("HORIZON_URL", "http://horizon.invalid")

from backstop.core.domain_types import NEVER_INVESTED, Role  # noqa: E402
from backstop.db.base import Base  # noqa: E402
import backstop.models  # noqa: E402,F401
from backstop.models.entity import Entity  # noqa: E402
from backstop.models.investor import Investor  # noqa: E402
from backstop.models.project import Project  # noqa: E402


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


async def _persist(db, record):
    db.add(record)
    await db.commit()
    await db.refresh(record)
    return record


@pytest.fixture
async def guarantor(test_db):
    """Guarantor entity with a wallet the fake vault can decrypt."""
    return await _persist(test_db, Entity(
        name="Sunrise Guarantee Fund",
        role=Role.GUARANTOR.value,
        first_loss_guarantee=None,
        first_loss_guarantee_amt=Decimal("0"),
        public_key="GGUARANTOR",
        encrypted_seed="sealed-guarantor-seed",
    ))


@pytest.fixture
async def developer(test_db):
    """Plain entity without the guarantor role."""
    return await _persist(test_db, Entity(
        name="Panel Builders Ltd",
        role=Role.ENTITY.value,
        first_loss_guarantee=None,
        first_loss_guarantee_amt=Decimal("0"),
        public_key="GDEVELOPER",
        encrypted_seed="sealed-developer-seed",
    ))


@pytest.fixture
async def project(test_db):
    return await _persist(test_db, Project(escrow_pubkey="GESCROW", stage=3))


@pytest.fixture
async def investor(test_db):
    """Investor who accepted the terms and has never invested."""
    return await _persist(test_db, Investor(
        name="Ada Investor",
        role=Role.INVESTOR.value,
        legal=True,
        public_key="GINVESTOR",
        encrypted_seed="sealed-investor-seed",
        voting_balance=Decimal("10"),
        amount_invested=NEVER_INVESTED,
        invested_projects=[],
        invested_project_indices=[],
        is_company=False,
        company=None,
    ))
