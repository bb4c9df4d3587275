"""Consolidated dashboard over several portfolios."""

from foliotrack.services.dashboard.models import AllocationItem, DashboardSummary, PortfolioBreakdown
from foliotrack.services.dashboard.service import DashboardService, allocate, top_movers

__all__ = [
    "DashboardService",
    "DashboardSummary",
    "PortfolioBreakdown",
    "AllocationItem",
    "allocate",
    "top_movers",
]
