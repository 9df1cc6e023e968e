"""Aave loan health — normalized loan positions and risk/carry metrics."""
from .analytics import (
    HealthStatus,
    classify_health,
    compute_loan_metrics,
    summarize_portfolio,
    weighted_average,
)
from .models import (
    AssetPosition,
    LoanMetrics,
    LoanPosition,
    PortfolioSummary,
    WalletSnapshot,
)
from .protocols.aave import build_loan_positions

__all__ = [
    "AssetPosition",
    "HealthStatus",
    "LoanMetrics",
    "LoanPosition",
    "PortfolioSummary",
    "WalletSnapshot",
    "build_loan_positions",
    "classify_health",
    "compute_loan_metrics",
    "summarize_portfolio",
    "weighted_average",
]
