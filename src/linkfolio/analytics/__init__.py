"""Profile view / link click tracking and analytics aggregation."""

from .aggregator import (
    AnalyticsReport,
    aggregate_analytics,
    build_report,
    calculate_trend,
    click_through_rate,
)
from .tracking import RecordResult, record_link_click, record_profile_view

__all__ = [
    "AnalyticsReport",
    "aggregate_analytics",
    "build_report",
    "calculate_trend",
    "click_through_rate",
    "RecordResult",
    "record_link_click",
    "record_profile_view",
]
