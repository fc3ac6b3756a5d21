"""Stellar Ledger Client - balance queries and signed payments against Horizon.

Invariants:
    - Query failures raise LedgerQueryError; submit failures raise TransactionSubmissionError
    - No automatic retry on submit: a payment may have landed even if the call failed
    - Amounts are sent with exactly 7 decimal places, rounded down, never up
    - The signing secret is used to build a Keypair and dropped; it is never logged

Design Decisions:
    - stellar-sdk's synchronous Server wrapped in asyncio.to_thread: keeps the
      async boundary of the protocols without an extra HTTP stack for the SDK
    - Balance parsing split into a pure function (parse_balance) so the lookup
      rules are testable without Horizon
"""

import asyncio
import logging
from decimal import Decimal, InvalidOperation, ROUND_DOWN

from stellar_sdk import Asset, Keypair, Network, Server, TransactionBuilder
from stellar_sdk.client.requests_client import RequestsClient
from stellar_sdk.exceptions import SdkError

from backstop.core.domain_types import (
    LEDGER_PRECISION, NetworkMode, TransferReceipt, TxHash,
)
from backstop.core.errors import LedgerQueryError, TransactionSubmissionError

logger = logging.getLogger(__name__)

_NETWORK_PASSPHRASES = {
    NetworkMode.SANDBOX: Network.TESTNET_NETWORK_PASSPHRASE,
    NetworkMode.PRODUCTION: Network.PUBLIC_NETWORK_PASSPHRASE,
}


def format_amount(amount: Decimal) -> str:
    """Render an amount the way Horizon expects it: 7 decimals, rounded down."""
    return format(amount.quantize(LEDGER_PRECISION, rounding=ROUND_DOWN), "f")


def parse_balance(
    balances: list[dict], asset_code: str | None, issuer: str | None = None,
) -> Decimal:
    """Pick one balance line out of a Horizon account record.

    asset_code=None selects the native balance. A missing trustline is an
    error, not a zero balance, matching what Horizon reports for the account.
    """
    for line in balances:
        if asset_code is None:
            if line.get("asset_type") != "native":
                continue
        else:
            if line.get("asset_code") != asset_code:
                continue
            if issuer and line.get("asset_issuer") != issuer:
                continue
        try:
            return Decimal(line["balance"])
        except (KeyError, InvalidOperation) as e:
            raise ValueError(f"malformed balance line: {e}")
    raise ValueError(f"no balance line for {asset_code or 'native'}")


class StellarLedgerClient:
    """LedgerClient implementation backed by a Horizon server."""

    def __init__(
        self,
        horizon_url: str,
        network_mode: NetworkMode = NetworkMode.SANDBOX,
        base_fee: int = 100,
        timeout_seconds: int = 30,
    ):
        self.server = Server(
            horizon_url=horizon_url,
            client=RequestsClient(
                num_retries=0,
                request_timeout=timeout_seconds,
                post_timeout=timeout_seconds,
            ),
        )
        self.network_passphrase = _NETWORK_PASSPHRASES[network_mode]
        self.base_fee = base_fee
        self.timeout_seconds = timeout_seconds

    # ─── Queries ─────────────────────────────────────────────────

    def _load_balances(self, public_key: str) -> list[dict]:
        record = self.server.accounts().account_id(public_key).call()
        return record.get("balances", [])

    async def _balance(
        self, public_key: str, asset_code: str | None, issuer: str | None = None,
    ) -> Decimal:
        try:
            balances = await asyncio.to_thread(self._load_balances, public_key)
            return parse_balance(balances, asset_code, issuer)
        except (SdkError, ValueError) as e:
            logger.warning(
                f"Balance query failed: {e}",
                extra={"asset_code": asset_code or "native"},
            )
            raise LedgerQueryError(str(e), public_key)

    async def get_asset_balance(
        self, public_key: str, asset_code: str, issuer_key: str | None = None,
    ) -> Decimal:
        return await self._balance(public_key, asset_code, issuer_key)

    async def get_native_balance(self, public_key: str) -> Decimal:
        return await self._balance(public_key, None)

    # ─── Transfers ───────────────────────────────────────────────

    def _submit_payment(
        self, asset: Asset, destination_key: str, amount: Decimal,
        signing_secret: str, memo: str,
    ) -> TransferReceipt:
        keypair = Keypair.from_secret(signing_secret)
        source = self.server.load_account(keypair.public_key)
        tx = (
            TransactionBuilder(
                source_account=source,
                network_passphrase=self.network_passphrase,
                base_fee=self.base_fee,
            )
            .append_payment_op(
                destination=destination_key,
                asset=asset,
                amount=format_amount(amount),
            )
            .add_text_memo(memo)
            .set_timeout(self.timeout_seconds)
            .build()
        )
        tx.sign(keypair)
        response = self.server.submit_transaction(tx)
        return TransferReceipt(
            ledger=int(response.get("ledger", 0)),
            tx_hash=TxHash(response["hash"]),
        )

    async def _send(
        self, asset: Asset, destination_key: str, amount: Decimal,
        signing_secret: str, memo: str,
    ) -> TransferReceipt:
        try:
            return await asyncio.to_thread(
                self._submit_payment, asset, destination_key, amount,
                signing_secret, memo,
            )
        except (SdkError, ValueError, KeyError) as e:
            extras = getattr(e, "extras", None) or {}
            result_codes = extras.get("result_codes") if isinstance(extras, dict) else None
            logger.error(
                f"Payment submission failed: {type(e).__name__}",
                extra={"asset_code": asset.code},
            )
            raise TransactionSubmissionError(
                type(e).__name__, result_codes=result_codes,
            )

    async def send_asset(
        self,
        asset_code: str,
        issuer_key: str,
        destination_key: str,
        amount: Decimal,
        signing_secret: str,
        memo: str,
    ) -> TransferReceipt:
        try:
            asset = Asset(asset_code, issuer_key)
        except (SdkError, ValueError) as e:
            raise TransactionSubmissionError(f"invalid asset {asset_code}: {e}")
        return await self._send(
            asset, destination_key, amount, signing_secret, memo,
        )

    async def send_native(
        self,
        destination_key: str,
        amount: Decimal,
        signing_secret: str,
        memo: str,
    ) -> TransferReceipt:
        return await self._send(
            Asset.native(), destination_key, amount, signing_secret, memo,
        )
