"""Data structures for metric points and their Cloud Monitoring wire form."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union
import time

import numpy as np
from google.api import metric_pb2, monitored_resource_pb2
from google.cloud import monitoring_v3
from google.protobuf import timestamp_pb2

from cloudmetrics.config import (
    CUSTOM_METRIC_PREFIX,
    FUNCTION_NAME_LABEL,
    GLOBAL_RESOURCE_TYPE,
    Settings,
)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class UnsupportedValueError(TypeError):
    """Raised when a metric value has no TypedValue representation."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"unsupported metric value {value!r} of type {type(value).__name__}")


class ValueKind(str, Enum):
    INT64 = "int64"
    DOUBLE = "double"
    STRING = "string"


@dataclass(frozen=True)
class MetricValue:
    """A metric value tagged with the TypedValue field it maps to."""
    kind: ValueKind
    value: Union[int, float, str]

    @classmethod
    def from_python(cls, value: Any) -> "MetricValue":
        """Classify a Python or numpy scalar.

        bool must be checked before int since it is an int subclass.
        """
        if isinstance(value, (bool, np.bool_)):
            return cls(ValueKind.INT64, 1 if value else 0)

        if isinstance(value, (int, np.integer)):
            widened = int(value)
            if not INT64_MIN <= widened <= INT64_MAX:
                raise UnsupportedValueError(value)
            return cls(ValueKind.INT64, widened)

        if isinstance(value, (float, np.floating)):
            return cls(ValueKind.DOUBLE, float(value))

        if isinstance(value, str):
            return cls(ValueKind.STRING, value)

        raise UnsupportedValueError(value)

    def to_typed_value(self) -> monitoring_v3.TypedValue:
        if self.kind is ValueKind.INT64:
            return monitoring_v3.TypedValue(int64_value=self.value)
        if self.kind is ValueKind.DOUBLE:
            return monitoring_v3.TypedValue(double_value=self.value)
        return monitoring_v3.TypedValue(string_value=self.value)


def merge_labels(labels: Optional[Mapping[str, str]], function_name: str) -> Dict[str, str]:
    """Copy labels, adding function_name unless the caller already set it."""
    merged = dict(labels or {})
    merged.setdefault(FUNCTION_NAME_LABEL, function_name)
    return merged


@dataclass
class SeriesPoint:
    """A single metric observation with labels."""
    name: str
    labels: Dict[str, str]
    value: MetricValue
    end_time: float

    @property
    def metric_type(self) -> str:
        return f"{CUSTOM_METRIC_PREFIX}{self.name}"

    def label_key(self) -> str:
        """Generate a stable key from sorted labels."""
        items = sorted(self.labels.items())
        return ",".join(f"{k}={v}" for k, v in items)


def build_point(
    name: str,
    value: Any,
    labels: Optional[Mapping[str, str]],
    settings: Settings,
    now: Optional[float] = None
) -> SeriesPoint:
    """Build a point observed now. Raises UnsupportedValueError."""
    metric_value = MetricValue.from_python(value)
    return SeriesPoint(
        name=name,
        labels=merge_labels(labels, settings.function_name),
        value=metric_value,
        end_time=time.time() if now is None else now,
    )


def build_time_series(point: SeriesPoint, project_id: str) -> monitoring_v3.TimeSeries:
    seconds = int(point.end_time)
    nanos = int((point.end_time - seconds) * 10 ** 9)
    # Zero-width interval: only the end time is set
    interval = monitoring_v3.TimeInterval(
        end_time=timestamp_pb2.Timestamp(seconds=seconds, nanos=nanos)
    )

    return monitoring_v3.TimeSeries(
        metric=metric_pb2.Metric(type=point.metric_type, labels=point.labels),
        resource=monitored_resource_pb2.MonitoredResource(
            type=GLOBAL_RESOURCE_TYPE,
            labels={"project_id": project_id},
        ),
        points=[monitoring_v3.Point(interval=interval, value=point.value.to_typed_value())],
    )


def build_request(point: SeriesPoint, settings: Settings) -> monitoring_v3.CreateTimeSeriesRequest:
    """Wrap one point into a write request for the settings' project."""
    return monitoring_v3.CreateTimeSeriesRequest(
        name=settings.project_name,
        time_series=[build_time_series(point, settings.project_id)],
    )
