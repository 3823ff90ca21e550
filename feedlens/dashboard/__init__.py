"""
Dashboard component.

Filtering, stats, HTML rendering and an API client for the feedback UI.
"""

from feedlens.dashboard.filters import FeedbackFilters, apply_filters, compute_dashboard_stats
from feedlens.dashboard.client import DashboardClient, InsightsResult
from feedlens.dashboard.render import render_dashboard

__all__ = [
    "FeedbackFilters",
    "apply_filters",
    "compute_dashboard_stats",
    "DashboardClient",
    "InsightsResult",
    "render_dashboard"
]
