"""Aggregating metric sender and its per-invocation sessions

A session buffers datapoints and events and sends each kind in one request
when it is closed. Delivery is at most once: a failed batch is reported to
the error handlers and dropped.
"""
import threading
import time
from dataclasses import replace
from typing import Callable, Iterable, List, Optional
from metrics.exporters.base import BaseReceiverFactory
from metrics.models import Event, Measurement, MetricsCloseError, SendError
from logging_config import get_logger, log_error


logger = get_logger(__name__)

OnSendErrorHandler = Callable[[SendError], None]


class StaticAuthToken:
    """Holds an access token that never changes for the sender's lifetime"""

    def __init__(self, token: Optional[str]):
        self._token = token or ""

    @property
    def auth_token(self) -> str:
        return self._token

    def __repr__(self) -> str:
        return f"StaticAuthToken(set={bool(self._token)})"


class AggregateMetricSender:
    """Creates sessions bound to a pair of receiver factories and a token"""

    def __init__(self,
                 default_source_prefix: str,
                 datapoint_factory: BaseReceiverFactory,
                 event_factory: BaseReceiverFactory,
                 auth_token: StaticAuthToken,
                 error_handlers: Iterable[OnSendErrorHandler] = ()):
        self.default_source_prefix = default_source_prefix or ""
        self.datapoint_factory = datapoint_factory
        self.event_factory = event_factory
        self.auth_token = auth_token
        self.error_handlers = list(error_handlers)

    def create_session(self) -> "MetricSession":
        return MetricSession(self)


class MetricSession:
    """Open batch of outgoing datapoints and events"""

    def __init__(self, sender: AggregateMetricSender):
        self._sender = sender
        self._datapoints: List[Measurement] = []
        self._events: List[Event] = []
        self._lock = threading.Lock()
        self._closed = False
        self._datapoint_receiver = sender.datapoint_factory.create_receiver()
        self._event_receiver = sender.event_factory.create_receiver()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_datapoints(self) -> List[Measurement]:
        with self._lock:
            return list(self._datapoints)

    @property
    def pending_events(self) -> List[Event]:
        with self._lock:
            return list(self._events)

    def set_datapoint(self, measurement: Measurement) -> "MetricSession":
        """Queue a datapoint; dropped with a warning once the session is closed"""
        prefix = self._sender.default_source_prefix
        queued = Measurement(
            name=prefix + measurement.name,
            value=measurement.value,
            metric_type=measurement.metric_type,
            labels=list(measurement.labels),
            timestamp=measurement.timestamp if measurement.timestamp is not None else time.time(),
        )
        with self._lock:
            if self._closed:
                logger.warning("Session closed, dropping datapoint", metric=queued.name)
                return self
            self._datapoints.append(queued)
        return self

    def set_event(self, event: Event) -> "MetricSession":
        """Queue an event; dropped with a warning once the session is closed"""
        if event.timestamp is None:
            event = replace(event, timestamp=int(time.time() * 1000))
        with self._lock:
            if self._closed:
                logger.warning("Session closed, dropping event", event_type=event.event_type)
                return self
            self._events.append(event)
        return self

    def close(self) -> None:
        """Flush queued items and release transports

        Closing an already closed session does nothing. Raises
        MetricsCloseError when a transport cannot be released.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            datapoints, self._datapoints = self._datapoints, []
            events, self._events = self._events, []

        try:
            self._flush(self._datapoint_receiver, datapoints)
            self._flush(self._event_receiver, events)
        finally:
            self._release()

    def _flush(self, receiver, items: list) -> None:
        if not items:
            return
        try:
            receiver.send(self._sender.auth_token.auth_token, items)
        except SendError as e:
            self._report(e)
        except Exception as e:
            error = SendError(f"Failed to send batch: {e}", url=getattr(receiver, "url", None),
                              item_count=len(items))
            error.__cause__ = e
            self._report(error)

    def _report(self, error: SendError) -> None:
        for handler in self._sender.error_handlers:
            try:
                handler(error)
            except Exception as e:
                log_error(logger, e, {"component": "send_error_handler", "send_error": str(error)})

    def _release(self) -> None:
        failures = []
        for receiver in (self._datapoint_receiver, self._event_receiver):
            try:
                receiver.close()
            except OSError as e:
                failures.append(e)
        if failures:
            raise MetricsCloseError("; ".join(str(f) for f in failures)) from failures[0]
