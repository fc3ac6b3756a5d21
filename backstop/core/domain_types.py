"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - Monetary amounts are Decimal, never float (ledger amounts carry 7 decimals)
    - Role replaces the old boolean guarantor flag; one source of truth for capabilities
    - AssetSelector is either NativeAsset or CustomAsset, never a bare string
    - CredentialHandle is opaque: it is never logged and never equals a plaintext secret

Design Decisions:
    - NewType over dataclass wrappers for identifiers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (dispatch results are dicts)
    - Frozen dataclasses for the asset selector: hashable, usable as dict keys in tests
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import NewType, Union


# ─── Identity Types ──────────────────────────────────────────────

EntityIndex = NewType("EntityIndex", int)
InvestorIndex = NewType("InvestorIndex", int)
ProjectIndex = NewType("ProjectIndex", int)
PublicKey = NewType("PublicKey", str)
CredentialHandle = NewType("CredentialHandle", str)
TxHash = NewType("TxHash", str)


# ─── Value Types ─────────────────────────────────────────────────

NEVER_INVESTED = Decimal("-1")   # amount_invested sentinel
LEDGER_PRECISION = Decimal("0.0000001")
GUARANTOR_REFUND_MEMO = "guarantor refund"


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Capabilities an actor can hold. Checked only through require_role."""
    GUARANTOR = "guarantor"
    INVESTOR = "investor"
    ENTITY = "entity"


class NetworkMode(str, Enum):
    """Which ledger network the platform talks to; selects the stablecoin code."""
    SANDBOX = "sandbox"
    PRODUCTION = "production"


# ─── Asset Selector ──────────────────────────────────────────────

@dataclass(frozen=True)
class NativeAsset:
    """The ledger's native currency (XLM on Stellar)."""

    @property
    def code(self) -> str:
        return "native"


@dataclass(frozen=True)
class CustomAsset:
    """An issued asset. issuer=None means the platform stablecoin issuer."""
    code: str
    issuer: str | None = None


AssetSelector = Union[NativeAsset, CustomAsset]


@dataclass(frozen=True)
class TransferReceipt:
    """What the ledger returns for an accepted transfer."""
    ledger: int
    tx_hash: TxHash
