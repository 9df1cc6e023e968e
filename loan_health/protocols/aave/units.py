"""Fixed-point conversions for Aave reserve fields — pure, never raise."""
from __future__ import annotations

import math
from typing import Any

BPS_SCALE = 10_000
RAY = 10**27
MAX_RISK_FRACTION = 0.99


def to_number(value: Any) -> float:
    """Coerce a numeric string or number to a finite float, else 0.0.

    Examples:
        "1,250.5" → 1250.5
        "abc" → 0.0
        None → 0.0
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        parsed = float(value)
    elif isinstance(value, str):
        text = value.replace(",", "").strip()
        if not text:
            return 0.0
        try:
            parsed = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def bps_to_fraction(raw: Any) -> float:
    """Basis points → fraction, clamped to [0, 0.99]."""
    return min(MAX_RISK_FRACTION, max(0.0, to_number(raw) / BPS_SCALE))


def ray_to_fraction(raw: Any) -> float:
    """Ray-scaled (1e27) rate → fraction, floored at 0.

    Rates are deliberately left unclamped above 1.0.
    """
    return max(0.0, to_number(raw) / RAY)


def base_units_to_decimal(raw: Any, decimals: Any) -> float:
    """Token base units → decimal amount.

    Integer strings are divided exactly before rounding to float, so large
    18-decimal balances keep full float precision.
    """
    try:
        exponent = int(decimals)
    except (TypeError, ValueError, OverflowError):
        exponent = 0

    try:
        amount = int(str(raw).strip()) / 10**exponent
    except (ValueError, OverflowError, ZeroDivisionError):
        try:
            amount = to_number(raw) / 10**exponent
        except (OverflowError, ZeroDivisionError):
            return 0.0
    return amount if math.isfinite(amount) else 0.0
