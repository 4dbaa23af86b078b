"""Best-effort push of single metric points to Google Cloud Monitoring."""
from typing import Any, Callable, Mapping, Optional
import logging
import threading

from cloudmetrics.client import MetricClientHandle, default_handle
from cloudmetrics.config import SelfMetricsConfig, Settings, resolve_settings
from cloudmetrics.self_metrics import SelfMetrics, start_server
from cloudmetrics.series import UnsupportedValueError, build_point, build_request

logger = logging.getLogger(__name__)


class CloudMonitoringExporter:
    """
    Writes one time series with one point per call.

    Nothing is queued, batched or retried. Every failure is logged and
    dropped so emitting a metric never changes the caller's control flow.
    """

    def __init__(
        self,
        handle: Optional[MetricClientHandle] = None,
        settings_resolver: Callable[[], Settings] = resolve_settings,
        self_metrics: Optional[SelfMetrics] = None,
        timeout: Optional[float] = None
    ):
        """
        Args:
            handle: Client handle; the process-wide one when omitted
            settings_resolver: Called on every emission for project id and function name
            self_metrics: Optional local counters
            timeout: Default deadline in seconds for the write call
        """
        self.handle = handle if handle is not None else default_handle()
        self.settings_resolver = settings_resolver
        self.self_metrics = self_metrics
        self.timeout = timeout

    def push_metric(
        self,
        metric_name: str,
        value: Any,
        labels: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None
    ) -> bool:
        """Send value for metric_name. Returns True if the write succeeded."""
        client = self.handle.get()
        if client is None:
            if self.self_metrics:
                self.self_metrics.record_skipped()
            return False

        try:
            settings = self.settings_resolver()
            point = build_point(metric_name, value, labels, settings)
            request = build_request(point, settings)
        except UnsupportedValueError as e:
            logger.error(f"Dropping metric {metric_name}: {e}")
            if self.self_metrics:
                self.self_metrics.record_rejected(metric_name)
            return False
        except Exception as e:
            # Bad label values or strings protobuf cannot encode
            logger.error(f"Could not build time series for {metric_name}: {e}")
            if self.self_metrics:
                self.self_metrics.record_build_error(metric_name)
            return False

        deadline = timeout if timeout is not None else self.timeout

        try:
            if deadline is None:
                client.create_time_series(request=request)
            else:
                client.create_time_series(request=request, timeout=deadline)
        except Exception as e:
            logger.error(f"Could not write time series {point.metric_type}: {e}")
            if self.self_metrics:
                self.self_metrics.record_write_error(metric_name)
            return False

        logger.debug(
            f"Wrote {point.metric_type} value={point.value.value} "
            f"labels={{{point.label_key()}}} to {settings.project_name}"
        )
        if self.self_metrics:
            self.self_metrics.record_written(metric_name)
        return True

    def push_counter(
        self,
        metric_name: str,
        labels: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None
    ) -> bool:
        """Record an increment of 1."""
        return self.push_metric(metric_name, 1, labels, timeout=timeout)


_default_exporter: Optional[CloudMonitoringExporter] = None
_default_exporter_lock = threading.Lock()


def default_exporter() -> CloudMonitoringExporter:
    """Process-wide exporter used by the module-level functions.

    It counts its own emissions; long-running processes can expose the
    counters with serve_self_metrics().
    """
    global _default_exporter
    if _default_exporter is None:
        with _default_exporter_lock:
            if _default_exporter is None:
                _default_exporter = CloudMonitoringExporter(
                    self_metrics=SelfMetrics(prefix=SelfMetricsConfig().prefix)
                )
    return _default_exporter


def serve_self_metrics(config: SelfMetricsConfig) -> bool:
    """Expose the process-wide exporter's counters over HTTP.

    Returns False when the config leaves the endpoint disabled.
    """
    return start_server(config, default_exporter().self_metrics)


def push_metric(
    metric_name: str,
    value: Any,
    labels: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None
) -> bool:
    return default_exporter().push_metric(metric_name, value, labels, timeout=timeout)


def push_counter(
    metric_name: str,
    labels: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None
) -> bool:
    return default_exporter().push_counter(metric_name, labels, timeout=timeout)
