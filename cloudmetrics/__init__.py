"""Forward application counters and metrics to Google Cloud Monitoring."""
from cloudmetrics.client import ClientState, MetricClientHandle, default_handle
from cloudmetrics.config import Settings, resolve_settings
from cloudmetrics.exporter import CloudMonitoringExporter, push_counter, push_metric, serve_self_metrics
from cloudmetrics.series import MetricValue, UnsupportedValueError, ValueKind

__all__ = [
    "ClientState",
    "CloudMonitoringExporter",
    "MetricClientHandle",
    "MetricValue",
    "Settings",
    "UnsupportedValueError",
    "ValueKind",
    "default_handle",
    "push_counter",
    "push_metric",
    "resolve_settings",
    "serve_self_metrics",
]
