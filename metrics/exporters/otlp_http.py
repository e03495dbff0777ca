"""OTLP datapoint receiver for the SignalFx ingest API"""
import time
from typing import Dict, List, Tuple
from opentelemetry.proto.collector.metrics.v1 import metrics_service_pb2
from opentelemetry.proto.common.v1 import common_pb2
from opentelemetry.proto.metrics.v1 import metrics_pb2
from opentelemetry.proto.resource.v1 import resource_pb2
from metrics.models import Label, Measurement, MetricType
from .base import BaseReceiver, BaseReceiverFactory

SCOPE_NAME = "signalfx-azure-function-wrapper"


class OTLPDataPointReceiver(BaseReceiver[Measurement]):
    """Encodes measurements as an OTLP ExportMetricsServiceRequest"""

    content_type = "application/x-protobuf"

    def encode(self, items: List[Measurement]) -> bytes:
        return self.build_request(items).SerializeToString()

    def build_request(self, items: List[Measurement]) -> metrics_service_pb2.ExportMetricsServiceRequest:
        """Group measurements by name and type into one OTLP request"""
        grouped: Dict[Tuple[str, MetricType], List[Measurement]] = {}
        for measurement in items:
            grouped.setdefault((measurement.name, measurement.metric_type), []).append(measurement)

        otlp_metrics = [
            self._create_metric(name, metric_type, group)
            for (name, metric_type), group in grouped.items()
        ]

        scope_metrics = metrics_pb2.ScopeMetrics(
            scope=common_pb2.InstrumentationScope(name=SCOPE_NAME),
            metrics=otlp_metrics
        )
        resource_metrics = metrics_pb2.ResourceMetrics(
            resource=resource_pb2.Resource(),
            scope_metrics=[scope_metrics]
        )
        return metrics_service_pb2.ExportMetricsServiceRequest(resource_metrics=[resource_metrics])

    def _create_metric(self, name: str, metric_type: MetricType,
                       group: List[Measurement]) -> metrics_pb2.Metric:
        data_points = [self._create_data_point(m) for m in group]
        if metric_type == MetricType.COUNTER:
            return metrics_pb2.Metric(
                name=name,
                sum=metrics_pb2.Sum(
                    data_points=data_points,
                    aggregation_temporality=metrics_pb2.AGGREGATION_TEMPORALITY_DELTA,
                    is_monotonic=True
                )
            )
        return metrics_pb2.Metric(name=name, gauge=metrics_pb2.Gauge(data_points=data_points))

    def _create_data_point(self, measurement: Measurement) -> metrics_pb2.NumberDataPoint:
        timestamp = measurement.timestamp if measurement.timestamp is not None else time.time()
        time_unix_nano = int(timestamp * 1_000_000_000)
        data_point = metrics_pb2.NumberDataPoint(
            attributes=convert_labels_to_attributes(measurement.labels),
            time_unix_nano=time_unix_nano,
        )
        if measurement.metric_type == MetricType.COUNTER:
            data_point.start_time_unix_nano = time_unix_nano
        value = measurement.value
        if isinstance(value, int) and not isinstance(value, bool):
            data_point.as_int = value
        else:
            data_point.as_double = float(value)
        return data_point


def convert_labels_to_attributes(labels: List[Label]) -> List[common_pb2.KeyValue]:
    """Convert label pairs to OTLP attributes, keeping duplicates and order"""
    return [
        common_pb2.KeyValue(key=key, value=common_pb2.AnyValue(string_value=str(value)))
        for key, value in labels
    ]


class OTLPDataPointReceiverFactory(BaseReceiverFactory):
    """Datapoint receivers for the endpoint's OTLP ingest path"""

    def create_receiver(self) -> OTLPDataPointReceiver:
        return OTLPDataPointReceiver(self.endpoint.datapoint_url, self.timeout_ms)
