"""Wallet-level rollup of per-loan metrics."""
from __future__ import annotations

import math
from typing import Sequence

from ..models import LoanMetrics, PortfolioSummary


def _ratio(numerator: float, denominator: float) -> float:
    if not denominator > 0:
        return 0.0
    result = numerator / denominator
    return 0.0 if math.isnan(result) else result


def average_health_factor(metrics: Sequence[LoanMetrics]) -> float:
    """Mean of the finite health factors, +inf if there are none.

    Debt-free loans report +inf and are left out so they cannot mask the
    risk of the wallet's leveraged loans.
    """
    finite = [m.health_factor for m in metrics if math.isfinite(m.health_factor)]
    if not finite:
        return float("inf")
    return sum(finite) / len(finite)


def summarize_portfolio(metrics: Sequence[LoanMetrics]) -> PortfolioSummary | None:
    """Aggregate every loan's metrics; None when the wallet has no loans."""
    if not metrics:
        return None

    total_debt = sum(m.debt for m in metrics)
    total_collateral = sum(m.collateral_usd for m in metrics)
    total_net_worth = sum(m.equity for m in metrics)
    total_supply_earn = sum(m.supply_earn_usd for m in metrics)
    total_borrow_cost = sum(m.borrow_cost_usd for m in metrics)
    total_deploy_earn = sum(m.deploy_earn_usd for m in metrics)
    total_net_earn = sum(m.net_earn_usd for m in metrics)
    total_max_borrow = sum(m.max_borrow_by_ltv for m in metrics)

    return PortfolioSummary(
        loan_count=len(metrics),
        total_debt=total_debt,
        total_collateral=total_collateral,
        total_net_worth=total_net_worth,
        total_supply_earn=total_supply_earn,
        total_borrow_cost=total_borrow_cost,
        total_deploy_earn=total_deploy_earn,
        total_net_earn=total_net_earn,
        average_health_factor=average_health_factor(metrics),
        average_supply_apy=_ratio(total_supply_earn, total_collateral),
        average_borrow_apy=_ratio(total_borrow_cost, total_debt),
        portfolio_net_apy=_ratio(total_net_earn, total_net_worth),
        borrow_power_used=_ratio(total_debt, total_max_borrow),
    )
