"""Service test fixtures - fakes wired into real SQL repositories.

Invariants:
    - Ledger, vault and oracle are fakes from tests/services/fakes.py
    - Repositories are the real SQL implementations on the per-test SQLite database
    - Each replenisher gets its own WalletLockRegistry (no cross-test lock sharing)
"""

from decimal import Decimal

import pytest

from backstop.core.domain_types import NetworkMode
from backstop.infrastructure.repositories import (
    SqlAuditRepository, SqlEntityRepository, SqlInvestorRepository,
    SqlProjectRepository,
)
from backstop.services.escrow_replenisher import EscrowReplenisher, WalletLockRegistry
from backstop.services.guarantor_capability import GuarantorCapability
from backstop.services.investor_admission import InvestorAdmission
from backstop.services.investor_profile import InvestorProfile
from backstop.services.operation_dispatch import OperationDispatch
from backstop.services.voting_ledger import VotingLedger

from tests.services.fakes import (
    STABLE_ISSUER, FakeLedgerClient, FakePriceOracle, FakeVault,
)


@pytest.fixture
def ledger():
    return FakeLedgerClient()


@pytest.fixture
def vault():
    return FakeVault()


@pytest.fixture
def oracle():
    return FakePriceOracle(Decimal("0.10"))


@pytest.fixture
def guarantor_capability(test_db, vault):
    return GuarantorCapability(SqlEntityRepository(test_db), vault)


@pytest.fixture
def replenisher(test_db, ledger, vault):
    return EscrowReplenisher(
        SqlProjectRepository(test_db),
        ledger,
        vault,
        SqlAuditRepository(test_db),
        stablecoin_issuer=STABLE_ISSUER,
        fee_reserve=Decimal("1"),
        locks=WalletLockRegistry(),
    )


@pytest.fixture
def admission(ledger, oracle):
    return InvestorAdmission(ledger, oracle, NetworkMode.SANDBOX)


@pytest.fixture
def voting(test_db):
    return VotingLedger(SqlInvestorRepository(test_db))


@pytest.fixture
def profile(test_db):
    return InvestorProfile(SqlInvestorRepository(test_db))


@pytest.fixture
def dispatch(guarantor_capability, replenisher, admission, voting, profile):
    return OperationDispatch(
        guarantor_capability, replenisher, admission, voting, profile,
    )
