"""Application services."""

from .analytics import (
    AnalyticsService,
    get_analytics_service,
    get_record_repository,
    reset_analytics_state,
)

__all__ = [
    "AnalyticsService",
    "get_analytics_service",
    "get_record_repository",
    "reset_analytics_state",
]
