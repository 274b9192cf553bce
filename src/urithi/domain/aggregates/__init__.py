"""Aggregates package."""

from .base import Aggregate
from .estate import Estate, EstateFinancialSummary, FinancialTotals
from .will import Will, WillStatus

__all__ = [
    "Aggregate",
    "Estate",
    "EstateFinancialSummary",
    "FinancialTotals",
    "Will",
    "WillStatus",
]
