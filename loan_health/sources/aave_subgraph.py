"""Aave v3 subgraph client with per-market endpoint fallback."""
from __future__ import annotations

import asyncio
import logging
import ssl
from dataclasses import dataclass, field
from typing import Any

import aiohttp
import certifi

from ..config import MarketConfig, SubgraphConfig
from ..protocols.aave.parser import MARKET_KEY

logger = logging.getLogger(__name__)

USER_RESERVES_QUERY = """
query UserReserves($user: String!, $first: Int!) {
  userReserves(first: $first, where: { user: $user }) {
    currentATokenBalance
    currentTotalDebt
    usageAsCollateralEnabledOnUser
    reserve {
      symbol
      decimals
      underlyingAsset
      baseLTVasCollateral
      reserveLiquidationThreshold
      liquidityRate
      variableBorrowRate
    }
  }
}
"""

_HOSTED_SERVICE_REMOVED = "endpoint has been removed"


class SubgraphError(RuntimeError):
    """Raised when no market could be fetched from any endpoint."""


@dataclass
class MarketFetchResult:
    market_name: str
    reserves: list[dict[str, Any]] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)
    saw_hosted_service_removal: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures


class AaveSubgraphSource:
    """Fetch a wallet's user reserves from every configured Aave market."""

    def __init__(
        self, config: SubgraphConfig, markets: tuple[MarketConfig, ...]
    ) -> None:
        self.api_key = config.api_key
        self.gateway_url = config.gateway_url
        self.timeout = config.timeout
        self.page_size = config.page_size
        self.markets = markets

    def endpoints_for(self, market: MarketConfig) -> list[str]:
        """Candidate endpoints in the order they are tried."""
        endpoints: list[str] = []
        if self.api_key and market.subgraph_id:
            endpoints.append(
                self.gateway_url.format(
                    api_key=self.api_key, subgraph_id=market.subgraph_id
                )
            )
        endpoints.extend(market.fallback_endpoints)
        return endpoints

    async def _fetch_market(
        self,
        session: aiohttp.ClientSession,
        market: MarketConfig,
        wallet_address: str,
    ) -> MarketFetchResult:
        result = MarketFetchResult(market_name=market.name)
        endpoints = self.endpoints_for(market)
        if not endpoints:
            result.failures.append(
                "No endpoint configured (set THE_GRAPH_API_KEY)."
            )
            return result

        payload = {
            "query": USER_RESERVES_QUERY,
            "variables": {"user": wallet_address.lower(), "first": self.page_size},
        }

        for endpoint in endpoints:
            try:
                async with session.post(
                    endpoint,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        result.failures.append(f"{endpoint} ({response.status})")
                        logger.warning(
                            "Subgraph endpoint %s returned HTTP %s",
                            endpoint, response.status,
                        )
                        continue
                    body = await response.json()
            except Exception as e:
                result.failures.append(f"{endpoint} (network)")
                logger.warning("Subgraph endpoint %s failed: %s", endpoint, e)
                continue

            if not isinstance(body, dict):
                result.failures.append(f"{endpoint} (malformed response)")
                continue

            errors = body.get("errors") or []
            if errors:
                if any(
                    _HOSTED_SERVICE_REMOVED in str(err.get("message", "")).lower()
                    for err in errors
                    if isinstance(err, dict)
                ):
                    result.saw_hosted_service_removal = True
                result.failures.append(f"{endpoint} (GraphQL error)")
                logger.warning("Subgraph endpoint %s returned errors: %s", endpoint, errors)
                continue

            data = body.get("data")
            reserves = data.get("userReserves") if isinstance(data, dict) else None
            if not isinstance(reserves, list):
                result.failures.append(f"{endpoint} (malformed response)")
                logger.warning("Subgraph endpoint %s returned no userReserves list", endpoint)
                continue

            logger.info(
                "Fetched %d reserves for market %s from %s",
                len(reserves), market.name, endpoint,
            )
            return MarketFetchResult(market_name=market.name, reserves=reserves)

        return result

    async def fetch_market_results(self, wallet_address: str) -> list[MarketFetchResult]:
        """Fetch every market concurrently, one result per market."""
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            return list(
                await asyncio.gather(
                    *(
                        self._fetch_market(session, market, wallet_address)
                        for market in self.markets
                    )
                )
            )

    async def fetch_user_reserves(self, wallet_address: str) -> list[dict[str, Any]]:
        """Return market-tagged user reserves from every market that answered.

        Raises:
            SubgraphError: If no market succeeded on any endpoint.
        """
        results = await self.fetch_market_results(wallet_address)

        successful = [r for r in results if r.ok]
        if successful:
            return [
                {**reserve, MARKET_KEY: r.market_name}
                for r in successful
                for reserve in r.reserves
            ]

        if not self.api_key and any(r.saw_hosted_service_removal for r in results):
            raise SubgraphError(
                "Aave subgraph hosted-service endpoints were deprecated. "
                "Set THE_GRAPH_API_KEY (The Graph API key) and retry."
            )

        failure_text = " | ".join(
            f"{r.market_name}: {', '.join(r.failures)}" for r in results
        )
        raise SubgraphError(
            f"Unable to fetch Aave user reserves from any endpoint. Tried: {failure_text}"
        )
