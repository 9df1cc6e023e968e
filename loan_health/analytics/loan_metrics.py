"""Per-loan risk and carry metrics — pure functions, no I/O."""
from __future__ import annotations

import math
from dataclasses import fields, replace

from ..config import ThresholdsConfig
from ..models import AssetPosition, LoanMetrics, LoanPosition
from .weighting import weighted_average

INF = float("inf")

# First-order equity sensitivity is quoted for a 10% collateral price move.
PRICE_MOVE = 0.10


def _ratio(numerator: float, denominator: float, fallback: float) -> float:
    """numerator / denominator when denominator > 0, else ``fallback``."""
    if not denominator > 0:
        return fallback
    result = numerator / denominator
    return fallback if math.isnan(result) else result


def _scrub_nan(metrics: LoanMetrics) -> LoanMetrics:
    """Replace any NaN (from inf - inf or inf * 0) with 0.0."""
    changes = {
        f.name: 0.0
        for f in fields(metrics)
        if isinstance(getattr(metrics, f.name), float)
        and math.isnan(getattr(metrics, f.name))
    }
    return replace(metrics, **changes) if changes else metrics


def primary_collateral(supplied: tuple[AssetPosition, ...]) -> AssetPosition | None:
    """Largest collateral by USD value; the first one wins an exact tie."""
    if not supplied:
        return None
    return max(supplied, key=lambda asset: asset.usd_value)


def compute_loan_metrics(
    loan: LoanPosition | None,
    deploy_rate: float | None = None,
    thresholds: ThresholdsConfig | None = None,
) -> LoanMetrics:
    """Derive the full metric set for one loan.

    ``loan=None`` (nothing selected) returns the neutral ``LoanMetrics()``.

    The liquidation price is a single-asset approximation: every collateral
    asset other than the primary one is assumed to keep its current USD
    value, and the primary asset's price is solved for the point where the
    health factor reaches exactly 1. With several volatile collateral assets
    the real liquidation point differs.

    Args:
        loan: Position to evaluate.
        deploy_rate: Yield earned on the borrowed funds wherever they are
            redeployed. Not observable on-chain; when None it comes from
            ``thresholds.deploy_rate`` (0 by default).
        thresholds: Advisory alert levels; defaults to ``ThresholdsConfig()``.
    """
    if loan is None:
        return LoanMetrics()
    thresholds = thresholds or ThresholdsConfig()

    debt = loan.total_borrowed_usd
    collateral_usd = loan.total_supplied_usd
    equity = collateral_usd - debt

    ltv_max = weighted_average(loan.supplied, lambda a: a.max_ltv)
    lt = weighted_average(loan.supplied, lambda a: a.liq_threshold)
    r_supply = weighted_average(loan.supplied, lambda a: a.supply_rate)
    r_borrow = loan.borrowed.borrow_rate
    r_deploy = thresholds.deploy_rate if deploy_rate is None else deploy_rate

    ltv = _ratio(debt, collateral_usd, 0.0)
    leverage = _ratio(collateral_usd, equity, INF)
    health_factor = _ratio(collateral_usd * lt, debt, 0.0) if debt > 0 else INF

    primary = primary_collateral(loan.supplied)
    units = primary.amount if primary else 0.0
    px = primary.usd_price if primary else 0.0
    primary_usd = primary.usd_value if primary else 0.0

    collateral_usd_at_liq = _ratio(debt, lt, INF)
    primary_usd_at_liq = collateral_usd_at_liq - (collateral_usd - primary_usd)
    liq_price = _ratio(primary_usd_at_liq, units, INF)
    ltv_at_liq = _ratio(debt, collateral_usd_at_liq, 0.0)
    price_drop_to_liq = (
        (px - liq_price) / px if px > 0 and math.isfinite(liq_price) else 0.0
    )

    supply_earn_usd = collateral_usd * r_supply
    borrow_cost_usd = debt * r_borrow
    deploy_earn_usd = debt * r_deploy
    net_earn_usd = supply_earn_usd + deploy_earn_usd - borrow_cost_usd

    max_borrow_by_ltv = collateral_usd * ltv_max

    metrics = LoanMetrics(
        loan_id=loan.loan_id,
        market_name=loan.market_name,
        primary_symbol=primary.symbol if primary else None,
        primary_amount=units,
        primary_price=px,
        debt=debt,
        collateral_usd=collateral_usd,
        equity=equity,
        ltv=ltv,
        leverage=leverage,
        health_factor=health_factor,
        liq_price=liq_price,
        collateral_usd_at_liq=collateral_usd_at_liq,
        ltv_at_liq=ltv_at_liq,
        price_drop_to_liq=price_drop_to_liq,
        supply_earn_usd=supply_earn_usd,
        borrow_cost_usd=borrow_cost_usd,
        deploy_earn_usd=deploy_earn_usd,
        net_earn_usd=net_earn_usd,
        net_apy_on_equity=_ratio(net_earn_usd, equity, 0.0),
        max_borrow_by_ltv=max_borrow_by_ltv,
        borrow_headroom=max_borrow_by_ltv - debt,
        borrow_power_used=_ratio(debt, max_borrow_by_ltv, 0.0),
        equity_move_for_10pct=leverage * PRICE_MOVE if math.isfinite(leverage) else 0.0,
        collateral_buffer_usd=collateral_usd - collateral_usd_at_liq,
        alert_hf=health_factor < thresholds.alert_health_factor,
        alert_ltv=ltv > thresholds.alert_ltv_ratio * lt,
        ltv_max=ltv_max,
        lt=lt,
        r_supply=r_supply,
        r_borrow=r_borrow,
        r_deploy=r_deploy,
    )
    return _scrub_nan(metrics)
