"""Sales-history statistics for a rural bus transport dashboard."""

from .analytics.aggregator import HistoryAggregator, compute_stats
from .analytics.service import StatisticsService
from .core.container import DIContainer

__all__ = [
    "HistoryAggregator",
    "StatisticsService",
    "DIContainer",
    "compute_stats",
    "domain",
    "analytics",
    "storage",
    "reporting",
    "core",
    "utils",
]
