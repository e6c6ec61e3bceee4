"""Monitoring - in-memory metrics for the autonomy governor."""

from odin_navigator.monitoring.metrics import (
    MetricPoint,
    MetricsCollector,
    MetricType,
)

__all__ = [
    "MetricPoint",
    "MetricsCollector",
    "MetricType",
]
