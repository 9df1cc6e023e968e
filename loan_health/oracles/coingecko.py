"""CoinGecko simple-price oracle."""
from __future__ import annotations

import logging
import ssl
from typing import Iterable

import aiohttp
import certifi

from ..config import CoinGeckoConfig

logger = logging.getLogger(__name__)


class CoinGeckoOracle:
    """Fetch USD prices from the CoinGecko ``simple/price`` endpoint."""

    def __init__(self, config: CoinGeckoConfig) -> None:
        self.url = config.url
        self.api_key = config.api_key
        self.coin_ids = {k.upper(): v for k, v in config.ids.items()}

    def _build_params(self, coin_ids: list[str]) -> dict[str, str]:
        params = {"ids": ",".join(coin_ids), "vs_currencies": "usd"}
        if self.api_key:
            params["x_cg_demo_api_key"] = self.api_key
        return params

    async def fetch_prices(
        self, symbols: Iterable[str] | None = None
    ) -> dict[str, float]:
        """Fetch current USD prices.

        Args:
            symbols: Optional tickers to price. If None, prices every
                configured ticker. Tickers without a CoinGecko id are skipped.

        Returns:
            Prices keyed by uppercase ticker. Every ticker sharing a returned
            coin id gets that price. Empty on any HTTP or network failure.
        """
        prices: dict[str, float] = {}

        coin_ids = self.coin_ids
        if symbols is not None:
            wanted = {s.upper() for s in symbols}
            coin_ids = {k: v for k, v in self.coin_ids.items() if k in wanted}

        ids = sorted(set(coin_ids.values()))
        if not ids:
            return prices

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    self.url, params=self._build_params(ids)
                ) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from CoinGecko: HTTP %s",
                            response.status,
                        )
                        return prices

                    payload = await response.json()

            # The payload is keyed by coin id; fan each quote out to every
            # configured ticker mapped to that id.
            for symbol, coin_id in self.coin_ids.items():
                quote = payload.get(coin_id) or {}
                usd = quote.get("usd") if isinstance(quote, dict) else None
                if isinstance(usd, (int, float)) and not isinstance(usd, bool):
                    prices[symbol] = float(usd)

            logger.info("Fetched %d prices from CoinGecko", len(prices))
            for symbol, price in sorted(prices.items()):
                logger.debug("  %s: $%.4f", symbol, price)

        except Exception as e:
            logger.error("Error fetching prices from CoinGecko: %s", e)

        return prices
