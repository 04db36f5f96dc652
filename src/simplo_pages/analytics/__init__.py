"""Page tracking and landing page metrics."""

from .tracker import PageTracker, EVENT_TYPES
from .metrics import (
    AnalyticsService,
    PageMetrics,
    DailyMetrics,
    classify_referrer,
    DATE_RANGES,
)

__all__ = [
    "PageTracker",
    "EVENT_TYPES",
    "AnalyticsService",
    "PageMetrics",
    "DailyMetrics",
    "classify_referrer",
    "DATE_RANGES",
]
