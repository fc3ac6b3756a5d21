"""Operation Dispatch - explicit routing from operation name to service method.

Invariants:
    - Every operation->handler mapping is visible; no getattr magic, no auto-discovery
    - execute() never raises: results are {"status": "ok", ...} or an error envelope
    - Unknown operations return UNKNOWN_OPERATION; malformed payloads VALIDATION_ERROR
    - Actors arrive already authenticated; authorization is still checked by each service

Design Decisions:
    - Explicit dict over getattr: adding an operation requires editing this dict
    - Three error layers: BackstopError (domain/infrastructure), pydantic ValidationError
      (payload), Exception (catch-all, never leaks internal details)
"""

import logging
from decimal import Decimal

from pydantic import ValidationError

from backstop.core.domain_types import CredentialHandle, CustomAsset, NativeAsset
from backstop.core.errors import BackstopError, ErrorSeverity
from backstop.schemas.company import CompanyDetails
from backstop.schemas.operations import (
    AdjustVotingInput, CanInvestInput, RecordInvestmentInput,
    RegisterGuaranteeInput, ReplenishEscrowInput,
)
from backstop.services.escrow_replenisher import EscrowReplenisher
from backstop.services.guarantor_capability import GuarantorCapability
from backstop.services.investor_admission import InvestorAdmission
from backstop.services.investor_profile import InvestorProfile
from backstop.services.voting_ledger import VotingLedger

logger = logging.getLogger(__name__)


def _amount(value: Decimal) -> str:
    return format(value, "f")


class OperationDispatch:
    """Routes operation name -> handler. Explicit registration, no auto-discovery."""

    def __init__(
        self,
        guarantor: GuarantorCapability,
        replenisher: EscrowReplenisher,
        admission: InvestorAdmission,
        voting: VotingLedger,
        profile: InvestorProfile,
    ):
        self.guarantor = guarantor
        self.replenisher = replenisher
        self.admission = admission
        self.voting = voting
        self.profile = profile

        self._handlers = {
            # Guarantor (entity actors)
            "register_first_loss_guarantee": self._register_guarantee,
            "replenish_escrow": self._replenish_escrow,

            # Investor actors
            "can_invest": self._can_invest,
            "adjust_voting_balance": self._adjust_voting_balance,
            "record_investment": self._record_investment,
            "mark_as_company": self._mark_as_company,
            "set_company_details": self._set_company_details,
        }

    @property
    def operations(self) -> list[str]:
        return sorted(self._handlers)

    async def execute(self, operation: str, actor: object, payload: dict) -> dict:
        """Route operation to its handler. Returns a result dict, never raises."""
        handler = self._handlers.get(operation)
        if not handler:
            return {
                "status": "error",
                "error": {
                    "code": "UNKNOWN_OPERATION",
                    "message": f"Operation '{operation}' does not exist.",
                    "category": "validation",
                    "severity": ErrorSeverity.ERROR.value,
                },
            }
        try:
            return await handler(actor, payload)
        except ValidationError as e:
            logger.warning(f"Invalid payload for {operation}: {e.error_count()} error(s)")
            return _validation_error_response(e)
        except BackstopError as e:
            logger.warning(
                f"{operation} failed: {e.message}",
                extra={"error_code": e.code, "operation": operation},
            )
            return e.to_response()
        except Exception as e:
            logger.error(f"Unhandled exception in {operation}: {e}", exc_info=True)
            return {
                "status": "error",
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            }

    # ─── Handlers ────────────────────────────────────────────────

    async def _register_guarantee(self, entity, payload: dict) -> dict:
        data = RegisterGuaranteeInput.model_validate(payload)
        await self.guarantor.register_first_loss_guarantee(
            entity, CredentialHandle(data.credential_handle), data.amount,
        )
        return {"status": "ok", "first_loss_guarantee_amt": _amount(data.amount)}

    async def _replenish_escrow(self, entity, payload: dict) -> dict:
        data = ReplenishEscrowInput.model_validate(payload)
        asset = (
            NativeAsset() if data.native
            else CustomAsset(data.asset_code, data.asset_issuer)
        )
        receipt = await self.replenisher.replenish_escrow(
            entity, data.project_index, asset, data.amount,
            data.passphrase.get_secret_value(),
        )
        return {
            "status": "ok",
            "tx_hash": receipt.tx_hash,
            "ledger": receipt.ledger,
            "asset_code": receipt.asset_code,
            "requested_amount": _amount(receipt.requested_amount),
            "submitted_amount": _amount(receipt.submitted_amount),
            "clamped": receipt.clamped,
            "audit_recorded": receipt.audit_recorded,
        }

    async def _can_invest(self, investor, payload: dict) -> dict:
        data = CanInvestInput.model_validate(payload)
        allowed = await self.admission.can_invest(investor, data.target_amount)
        return {"status": "ok", "can_invest": allowed}

    async def _adjust_voting_balance(self, investor, payload: dict) -> dict:
        data = AdjustVotingInput.model_validate(payload)
        balance = await self.voting.adjust_voting_balance(investor, data.delta)
        return {"status": "ok", "voting_balance": _amount(balance)}

    async def _record_investment(self, investor, payload: dict) -> dict:
        data = RecordInvestmentInput.model_validate(payload)
        total = await self.profile.record_investment(
            investor, data.project_asset, data.project_index, data.amount,
        )
        return {"status": "ok", "amount_invested": _amount(total)}

    async def _mark_as_company(self, investor, payload: dict) -> dict:
        await self.profile.mark_as_company(investor)
        return {"status": "ok", "is_company": True}

    async def _set_company_details(self, investor, payload: dict) -> dict:
        details = CompanyDetails.model_validate(payload)
        await self.profile.set_company_details(investor, details)
        return {"status": "ok", "company": details.model_dump()}


def _validation_error_response(exc: ValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "status": "error",
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid operation payload",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
