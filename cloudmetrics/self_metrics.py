"""Self-monitoring counters exposed with prometheus_client."""
from typing import Optional
from prometheus_client import Counter, CollectorRegistry, start_http_server
import logging

from cloudmetrics.config import SelfMetricsConfig

logger = logging.getLogger(__name__)


class SelfMetrics:
    """Counts what the emitter did with each call."""

    def __init__(self, registry: Optional[CollectorRegistry] = None, prefix: str = ""):
        # Use a custom registry to avoid exporting default Python/process metrics
        self.registry = registry if registry is not None else CollectorRegistry()
        self.prefix = prefix

        self.points_written_total = Counter(
            f"{prefix}points_written_total",
            "Time series points written to Cloud Monitoring",
            ["metric_name"],
            registry=self.registry
        )

        self.write_errors_total = Counter(
            f"{prefix}write_errors_total",
            "Failed create_time_series calls",
            ["metric_name"],
            registry=self.registry
        )

        self.rejected_values_total = Counter(
            f"{prefix}rejected_values_total",
            "Emissions dropped because of an unsupported value type",
            ["metric_name"],
            registry=self.registry
        )

        self.build_errors_total = Counter(
            f"{prefix}build_errors_total",
            "Emissions dropped because the time series could not be built",
            ["metric_name"],
            registry=self.registry
        )

        self.skipped_disabled_total = Counter(
            f"{prefix}skipped_disabled_total",
            "Emissions skipped because the Monitoring client is unavailable",
            registry=self.registry
        )

    def record_written(self, metric_name: str):
        self.points_written_total.labels(metric_name=metric_name).inc()

    def record_write_error(self, metric_name: str):
        self.write_errors_total.labels(metric_name=metric_name).inc()

    def record_rejected(self, metric_name: str):
        self.rejected_values_total.labels(metric_name=metric_name).inc()

    def record_build_error(self, metric_name: str):
        self.build_errors_total.labels(metric_name=metric_name).inc()

    def record_skipped(self):
        self.skipped_disabled_total.inc()

    def sample(self, name: str, metric_name: Optional[str] = None) -> float:
        """Current value of one of the counters, 0.0 if never touched."""
        labels = {"metric_name": metric_name} if metric_name is not None else {}
        value = self.registry.get_sample_value(f"{self.prefix}{name}", labels)
        return value or 0.0


def start_server(config: SelfMetricsConfig, self_metrics: SelfMetrics) -> bool:
    """Start Prometheus HTTP server for the self-metrics registry.

    Meant for long-running processes; returns False when disabled.
    """
    if not config.enabled:
        return False
    try:
        start_http_server(
            config.port,
            addr=config.bind_address,
            registry=self_metrics.registry
        )
        logger.info(
            f"Self-metrics listening on "
            f"{config.bind_address}:{config.port}/metrics"
        )
    except Exception as e:
        logger.error(f"Failed to start self-metrics HTTP server: {e}")
        raise
    return True
