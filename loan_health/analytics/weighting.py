"""Value-weighted averages over asset positions."""
from __future__ import annotations

import math
from typing import Callable, Sequence

from ..models import AssetPosition


def weighted_average(
    assets: Sequence[AssetPosition],
    selector: Callable[[AssetPosition], float],
) -> float:
    """Average ``selector(asset)`` weighted by each asset's USD value.

    Returns 0.0 when the total weight is not positive (empty list or every
    asset priced at zero).
    """
    total_weight = sum(asset.usd_value for asset in assets)
    if not math.isfinite(total_weight) or total_weight <= 0:
        return 0.0

    weighted = sum(selector(asset) * asset.usd_value for asset in assets)
    result = weighted / total_weight
    return result if math.isfinite(result) else 0.0
