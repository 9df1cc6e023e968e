"""Price oracle protocol — USD quotes keyed by ticker."""
from typing import Iterable, Protocol


class PriceOracle(Protocol):
    """Abstract interface for fetching USD prices by uppercase ticker."""

    async def fetch_prices(
        self, symbols: Iterable[str] | None = None
    ) -> dict[str, float]: ...
