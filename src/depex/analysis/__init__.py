"""
Analysis over the materialized view: statistics and the latest-version view.
"""

from .latest import collapse_non_latest, filter_latest, latest_version_ids
from .stats import GraphStats, compute_stats

__all__ = [
    "GraphStats",
    "collapse_non_latest",
    "compute_stats",
    "filter_latest",
    "latest_version_ids",
]
