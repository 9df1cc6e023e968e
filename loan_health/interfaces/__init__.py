"""Protocol interfaces for the loan health engine's collaborators."""
from .price_oracle import PriceOracle
from .reserve_source import ReserveSource

__all__ = ["PriceOracle", "ReserveSource"]
