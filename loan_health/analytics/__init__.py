"""Pure metric computations over loan positions."""
from .health import HealthStatus, classify_health
from .loan_metrics import compute_loan_metrics, primary_collateral
from .portfolio import average_health_factor, summarize_portfolio
from .weighting import weighted_average

__all__ = [
    "HealthStatus",
    "average_health_factor",
    "classify_health",
    "compute_loan_metrics",
    "primary_collateral",
    "summarize_portfolio",
    "weighted_average",
]
