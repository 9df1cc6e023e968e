"""Reserve source protocol — raw user-reserve acquisition."""
from typing import Any, Protocol


class ReserveSource(Protocol):
    """Abstract interface for fetching market-tagged user reserves."""

    async def fetch_user_reserves(self, wallet_address: str) -> list[dict[str, Any]]: ...
