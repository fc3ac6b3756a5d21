"""Domain Types - verifies rich type definitions and enum values.

Tests:
    - NewType wrappers exist and are callable
    - Enums have expected members and serialize to string
    - Asset selectors are frozen and hashable
"""

import dataclasses
from decimal import Decimal

import pytest

from backstop.core.domain_types import (
    EntityIndex, ProjectIndex, PublicKey, TxHash,
    NEVER_INVESTED, LEDGER_PRECISION, GUARANTOR_REFUND_MEMO,
    Role, NetworkMode, NativeAsset, CustomAsset, TransferReceipt,
)


def test_identity_types_wrap_primitives():
    assert EntityIndex(3) == 3
    assert ProjectIndex(4) == 4
    assert PublicKey("GABC") == "GABC"
    assert TxHash("ff" * 32) == "ff" * 32


def test_never_invested_sentinel_is_minus_one():
    assert NEVER_INVESTED == Decimal("-1")


def test_ledger_precision_is_seven_decimals():
    assert LEDGER_PRECISION.as_tuple().exponent == -7


def test_refund_memo_fits_text_memo():
    assert GUARANTOR_REFUND_MEMO == "guarantor refund"
    assert len(GUARANTOR_REFUND_MEMO.encode()) <= 28


def test_role_members():
    assert {r.value for r in Role} == {"guarantor", "investor", "entity"}


def test_role_compares_equal_to_raw_string():
    assert Role.GUARANTOR == "guarantor"


def test_network_mode_members():
    assert NetworkMode("sandbox") is NetworkMode.SANDBOX
    assert NetworkMode("production") is NetworkMode.PRODUCTION


def test_native_asset_code():
    assert NativeAsset().code == "native"
    assert NativeAsset() == NativeAsset()


def test_custom_asset_defaults_to_platform_issuer():
    assert CustomAsset("STABLEUSD").issuer is None


def test_asset_selectors_are_frozen_and_hashable():
    asset = CustomAsset("EURT", "GISSUER")
    with pytest.raises(dataclasses.FrozenInstanceError):
        asset.code = "USD"
    assert {asset: 1}[CustomAsset("EURT", "GISSUER")] == 1


def test_transfer_receipt_fields():
    receipt = TransferReceipt(ledger=42, tx_hash=TxHash("abc"))
    assert receipt.ledger == 42
    assert receipt.tx_hash == "abc"
