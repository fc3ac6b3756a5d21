"""Ticker Price Oracle - estimates the stable value of native-currency holdings.

Invariants:
    - exchange_native_for_stable never raises: no usable price means an estimate of 0
    - A failing or malformed ticker is skipped, the remaining tickers are averaged
    - Only finite, positive prices count toward the average

Design Decisions:
    - Average across several public tickers: one stale or manipulated feed moves
      the estimate less than it would on its own
    - Estimate 0 on total failure: admission control then falls back to the
      stable balance alone (fail-closed)
    - httpx.AsyncClient injectable: tests drive it with httpx.MockTransport
"""

import logging
from decimal import Decimal, InvalidOperation

import httpx

logger = logging.getLogger(__name__)


def extract_price(payload: object) -> Decimal | None:
    """Read a spot price from the ticker shapes we know (Kraken, Coinbase, Binance)."""
    if not isinstance(payload, dict):
        return None
    raw = None
    if isinstance(payload.get("result"), dict):
        # Kraken: {"result": {"XXLMZUSD": {"c": ["0.1012", "100"]}}}
        for pair in payload["result"].values():
            last = pair.get("c") if isinstance(pair, dict) else None
            if last:
                raw = last[0]
                break
    elif isinstance(payload.get("data"), dict):
        # Coinbase: {"data": {"amount": "0.1012"}}
        raw = payload["data"].get("amount")
    else:
        # Binance: {"price": "0.1012"}
        raw = payload.get("price")
    if raw is None:
        return None
    try:
        price = Decimal(str(raw))
    except InvalidOperation:
        return None
    if not price.is_finite() or price <= 0:
        return None
    return price


class TickerPriceOracle:
    """PriceOracle implementation averaging public exchange tickers."""

    def __init__(
        self,
        ticker_urls: list[str],
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.ticker_urls = list(ticker_urls)
        self.timeout_seconds = timeout_seconds
        self._client = client

    async def _fetch(self, client: httpx.AsyncClient, url: str) -> Decimal | None:
        try:
            response = await client.get(url, timeout=self.timeout_seconds)
            response.raise_for_status()
            return extract_price(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Ticker {url} unavailable: {e}")
            return None

    async def spot_price(self) -> Decimal | None:
        """Mean price across the tickers that answered, or None."""
        if self._client is not None:
            prices = [await self._fetch(self._client, url) for url in self.ticker_urls]
        else:
            async with httpx.AsyncClient() as client:
                prices = [await self._fetch(client, url) for url in self.ticker_urls]
        usable = [p for p in prices if p is not None]
        if not usable:
            return None
        return sum(usable, Decimal("0")) / len(usable)

    async def exchange_native_for_stable(self, native_amount: Decimal) -> Decimal:
        price = await self.spot_price()
        if price is None:
            logger.warning("No ticker price available, estimating native value as 0")
            return Decimal("0")
        return native_amount * price
