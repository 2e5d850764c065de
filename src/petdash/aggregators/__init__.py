"""Data aggregators for the home dashboard."""

from petdash.aggregators.dashboard import DashboardAggregator, DashboardState, combine_tips
from petdash.aggregators.reminders import merge_reminders, prune_expired

__all__ = [
    "DashboardAggregator",
    "DashboardState",
    "combine_tips",
    "merge_reminders",
    "prune_expired",
]
