"""Operation Schemas - Pydantic models validating the payloads handed to OperationDispatch.

Invariants:
    - Amounts parse to Decimal (strings or ints accepted, floats converted via str)
    - Replenishment selects exactly one asset: native=True or an asset_code
    - Passphrases are SecretStr: never rendered by repr() or model_dump()

Design Decisions:
    - Validation at the dispatch seam, not in services: services take typed arguments
      and trust them, the boundary rejects malformed input with VALIDATION_ERROR
"""

from decimal import Decimal

from pydantic import BaseModel, Field, SecretStr, model_validator


class RegisterGuaranteeInput(BaseModel):
    """register_first_loss_guarantee payload."""
    credential_handle: str = Field(min_length=1)
    amount: Decimal


class ReplenishEscrowInput(BaseModel):
    """replenish_escrow payload."""
    project_index: int = Field(ge=1)
    amount: Decimal
    passphrase: SecretStr
    native: bool = False
    asset_code: str | None = Field(None, min_length=1, max_length=12)
    asset_issuer: str | None = None

    @model_validator(mode="after")
    def exactly_one_asset(self) -> "ReplenishEscrowInput":
        if self.native and self.asset_code:
            raise ValueError("choose either native or asset_code, not both")
        if not self.native and not self.asset_code:
            raise ValueError("asset_code is required unless native is true")
        return self


class CanInvestInput(BaseModel):
    """can_invest payload."""
    target_amount: Decimal


class AdjustVotingInput(BaseModel):
    """adjust_voting_balance payload."""
    delta: Decimal


class RecordInvestmentInput(BaseModel):
    """record_investment payload."""
    project_asset: str = Field(min_length=1)
    project_index: int = Field(ge=1)
    amount: Decimal = Field(gt=0)
