"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class AssetPosition:
    """Single token supplied or owed within one market."""

    symbol: str
    address: str
    amount: float
    usd_price: float
    collateral_enabled: bool = False
    max_ltv: float = 0.0
    liq_threshold: float = 0.0
    supply_rate: float = 0.0
    borrow_rate: float = 0.0

    @property
    def usd_value(self) -> float:
        return self.amount * self.usd_price


@dataclass(frozen=True)
class LoanPosition:
    """One borrowed asset in a market, paired with the market's collateral."""

    loan_id: str
    market_name: str
    borrowed: AssetPosition
    supplied: tuple[AssetPosition, ...] = ()
    total_supplied_usd: float = 0.0
    total_borrowed_usd: float = 0.0


@dataclass(frozen=True)
class LoanMetrics:
    """Derived risk/return metrics for one loan.

    The defaults form the neutral record used when no loan is selected.
    """

    loan_id: str = ""
    market_name: str = ""
    primary_symbol: str | None = None
    primary_amount: float = 0.0
    primary_price: float = 0.0
    debt: float = 0.0
    collateral_usd: float = 0.0
    equity: float = 0.0
    ltv: float = 0.0
    leverage: float = 0.0
    health_factor: float = float("inf")
    liq_price: float = float("inf")
    collateral_usd_at_liq: float = float("inf")
    ltv_at_liq: float = 0.0
    price_drop_to_liq: float = 0.0
    supply_earn_usd: float = 0.0
    borrow_cost_usd: float = 0.0
    deploy_earn_usd: float = 0.0
    net_earn_usd: float = 0.0
    net_apy_on_equity: float = 0.0
    max_borrow_by_ltv: float = 0.0
    borrow_headroom: float = 0.0
    borrow_power_used: float = 0.0
    equity_move_for_10pct: float = 0.0
    collateral_buffer_usd: float = 0.0
    alert_hf: bool = False
    alert_ltv: bool = False
    ltv_max: float = 0.0
    lt: float = 0.0
    r_supply: float = 0.0
    r_borrow: float = 0.0
    r_deploy: float = 0.0


@dataclass(frozen=True)
class PortfolioSummary:
    """Rollup of every loan's metrics for one wallet."""

    loan_count: int
    total_debt: float
    total_collateral: float
    total_net_worth: float
    total_supply_earn: float
    total_borrow_cost: float
    total_deploy_earn: float
    total_net_earn: float
    average_health_factor: float
    average_supply_apy: float
    average_borrow_apy: float
    portfolio_net_apy: float
    borrow_power_used: float


@dataclass(frozen=True)
class WalletSnapshot:
    """Loans built from one fetch cycle for one wallet."""

    wallet: str
    loans: tuple[LoanPosition, ...] = ()
    last_updated: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
