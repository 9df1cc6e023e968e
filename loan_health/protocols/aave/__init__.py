from .parser import build_loan_positions, resolve_price, to_asset_position
from .units import base_units_to_decimal, bps_to_fraction, ray_to_fraction

__all__ = [
    "base_units_to_decimal",
    "bps_to_fraction",
    "build_loan_positions",
    "ray_to_fraction",
    "resolve_price",
    "to_asset_position",
]
