"""Per-invocation metric wrapper for Azure Functions handlers

Typical use::

    with MetricWrapper(context) as wrapper:
        try:
            ...
        except Exception:
            wrapper.error()
            raise
"""
import time
from typing import List, Optional
from config import Config
from environment.azure import get_default_dimensions, get_function_name, get_invocation_id
from metrics.endpoint import SignalFxEndpoint
from metrics.exporters.events import JSONEventReceiverFactory
from metrics.exporters.otlp_http import OTLPDataPointReceiverFactory
from metrics.models import Event, Label, Labels, Measurement, MetricsCloseError, normalize_labels
from metrics.sender import AggregateMetricSender, MetricSession, StaticAuthToken
from logging_config import bind_invocation, get_logger, log_send_error
from . import metric_sender


METRIC_NAME_PREFIX = "azure.function."
METRIC_NAME_INVOCATIONS = METRIC_NAME_PREFIX + "invocations"
METRIC_NAME_ERRORS = METRIC_NAME_PREFIX + "errors"
METRIC_NAME_DURATION = METRIC_NAME_PREFIX + "duration"


class MetricWrapper:
    """Reports invocation, error and duration metrics for one invocation"""

    def __init__(self, context, dimensions: Labels = None, auth_token: Optional[str] = None,
                 config: Optional[Config] = None, logger=None):
        self.config = config or Config()
        self.logger = logger or bind_invocation(
            get_logger(__name__), get_function_name(context), get_invocation_id(context)
        )

        token = auth_token if auth_token is not None else self.config.signalfx_auth_token
        if not token:
            self.logger.warning("SIGNALFX_AUTH_TOKEN is not set, ingest will reject metrics")

        timeout_ms = self.config.signalfx_send_timeout
        endpoint = SignalFxEndpoint.from_config(self.config)
        datapoint_factory = OTLPDataPointReceiverFactory(endpoint, timeout_ms)
        event_factory = JSONEventReceiverFactory(endpoint, timeout_ms)

        sender = AggregateMetricSender(
            "",
            datapoint_factory,
            event_factory,
            StaticAuthToken(token),
            [self._on_send_error],
        )
        self._session = sender.create_session()

        self._dimensions: List[Label] = get_default_dimensions(context, self.config, self.logger)
        self._dimensions.extend(normalize_labels(dimensions))

        self._registration = metric_sender.set_wrapper(self)

        self._closed = False
        self._start_time = time.perf_counter_ns()
        self._send_counter(METRIC_NAME_INVOCATIONS)

    @property
    def session(self) -> MetricSession:
        return self._session

    @property
    def dimensions(self) -> List[Label]:
        return list(self._dimensions)

    @property
    def elapsed_ms(self) -> float:
        """Wall time since construction in milliseconds"""
        return (time.perf_counter_ns() - self._start_time) / 1_000_000

    def _on_send_error(self, error) -> None:
        log_send_error(self.logger, error)

    def _send_counter(self, name: str) -> None:
        self.send_metric(Measurement.counter(name, 1))

    def send_metric(self, measurement: Measurement) -> None:
        """Queue a measurement with this invocation's default labels appended"""
        self._session.set_datapoint(measurement.with_labels(self._dimensions))

    def send_event(self, event: Event) -> None:
        """Queue an event; its own dimensions win over the default labels"""
        dimensions = dict(self._dimensions)
        dimensions.update(event.dimensions)
        self._session.set_event(Event(
            event_type=event.event_type,
            category=event.category,
            dimensions=dimensions,
            properties=event.properties,
            timestamp=event.timestamp,
        ))

    def error(self) -> None:
        """Count one error for this invocation"""
        self._send_counter(METRIC_NAME_ERRORS)

    def close(self) -> None:
        """Send the duration gauge and flush the session

        Safe to call more than once. Raises MetricsCloseError if the
        session transports cannot be released.
        """
        if self._closed:
            return
        self._closed = True
        try:
            self.send_metric(Measurement.gauge(METRIC_NAME_DURATION, self.elapsed_ms))
            self._session.close()
        finally:
            metric_sender.clear_wrapper(self, self._registration)

    def __enter__(self) -> "MetricWrapper":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        try:
            self.close()
        except MetricsCloseError as e:
            self.logger.warning("Exception thrown closing wrapper", error=str(e))
        return False
