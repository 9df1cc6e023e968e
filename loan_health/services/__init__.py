"""Service modules"""
from .snapshot import LoanHealthService

__all__ = ["LoanHealthService"]
