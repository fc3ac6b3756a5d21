"""Investor Admission - purchasing-power check before an order.

Tests cover:
    - legal=False denies with zero ledger queries
    - Either stable or converted native balance alone must exceed the target
    - Missing or failing balances count as zero, never raise
    - The native balance is only converted when positive
    - Stablecoin code follows the network mode fixed at construction
"""

from decimal import Decimal

import httpx
import pytest

from backstop.core.domain_types import NetworkMode
from backstop.infrastructure.price_oracle import TickerPriceOracle
from backstop.services.investor_admission import InvestorAdmission

from tests.services.fakes import NATIVE


async def test_terms_not_accepted_denies_without_queries(admission, ledger, investor):
    investor.legal = False
    ledger.set_balance("GINVESTOR", "STABLEUSD", 1_000_000)

    assert await admission.can_invest(investor, Decimal("10")) is False
    assert ledger.query_count == 0


async def test_stable_balance_alone_admits(admission, ledger, investor):
    ledger.set_balance("GINVESTOR", "STABLEUSD", 150)

    assert await admission.can_invest(investor, Decimal("100")) is True


async def test_stable_balance_equal_to_target_does_not_admit(admission, ledger, investor):
    ledger.set_balance("GINVESTOR", "STABLEUSD", 100)

    assert await admission.can_invest(investor, Decimal("100")) is False


async def test_native_value_alone_admits(admission, ledger, oracle, investor):
    # 2000 native at 0.10 -> 200 stable
    ledger.set_balance("GINVESTOR", NATIVE, 2000)

    assert await admission.can_invest(investor, Decimal("100")) is True
    assert oracle.calls == [Decimal("2000")]


async def test_sources_are_not_summed(admission, ledger, investor):
    ledger.set_balance("GINVESTOR", "STABLEUSD", 60)
    ledger.set_balance("GINVESTOR", NATIVE, 600)

    assert await admission.can_invest(investor, Decimal("100")) is False


async def test_both_queries_failing_denies_without_raising(admission, ledger, investor):
    assert await admission.can_invest(investor, Decimal("1")) is False
    assert ledger.query_count == 2


async def test_zero_native_balance_skips_oracle(admission, ledger, oracle, investor):
    ledger.set_balance("GINVESTOR", "STABLEUSD", 500)
    ledger.set_balance("GINVESTOR", NATIVE, 0)

    assert await admission.can_invest(investor, Decimal("100")) is True
    assert oracle.calls == []


async def test_check_does_not_mutate_investor(admission, ledger, investor):
    ledger.set_balance("GINVESTOR", "STABLEUSD", 500)
    before = (investor.voting_balance, investor.amount_invested, investor.legal)

    await admission.can_invest(investor, Decimal("100"))

    assert (investor.voting_balance, investor.amount_invested, investor.legal) == before


@pytest.mark.parametrize("mode,expected", [
    (NetworkMode.SANDBOX, "STABLEUSD"),
    (NetworkMode.PRODUCTION, "USD"),
])
async def test_stablecoin_code_follows_network_mode(ledger, oracle, investor, mode, expected):
    admission = InvestorAdmission(ledger, oracle, mode)
    ledger.set_balance("GINVESTOR", expected, 500)

    assert admission.stablecoin_code == expected
    assert await admission.can_invest(investor, Decimal("100")) is True


async def test_non_finite_ticker_price_counts_as_zero_native_value(ledger, investor):
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"price": "NaN"}),
    )
    oracle = TickerPriceOracle(
        ["https://ticker.test/price"],
        client=httpx.AsyncClient(transport=transport),
    )
    admission = InvestorAdmission(ledger, oracle, NetworkMode.SANDBOX)
    ledger.set_balance("GINVESTOR", NATIVE, 1_000_000)

    assert await admission.can_invest(investor, Decimal("1")) is False
