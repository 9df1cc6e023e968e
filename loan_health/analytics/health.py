"""Health factor classification."""
from __future__ import annotations

import math
from enum import Enum


class HealthStatus(str, Enum):
    INVALID = "Invalid"
    DANGER = "Danger"
    TIGHT = "Tight"
    OK = "OK"
    SAFE = "Safe"


# Upper bounds (exclusive) for each band, checked in order.
_BANDS: tuple[tuple[float, HealthStatus], ...] = (
    (1.1, HealthStatus.DANGER),
    (1.5, HealthStatus.TIGHT),
    (2.0, HealthStatus.OK),
)


def classify_health(health_factor: float) -> HealthStatus:
    """Map a health factor to its risk band.

    Non-finite values (including the +inf of a debt-free loan) and values
    at or below zero are INVALID.
    """
    if not math.isfinite(health_factor) or health_factor <= 0:
        return HealthStatus.INVALID
    for upper, status in _BANDS:
        if health_factor < upper:
            return status
    return HealthStatus.SAFE
