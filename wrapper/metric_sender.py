"""Access to the current invocation's wrapper from nested handler code

The current wrapper is stored in a ContextVar, so concurrent invocations on
different threads or asyncio tasks each see their own wrapper.
"""
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING, Optional
from metrics.models import Event, Measurement
from logging_config import get_logger

if TYPE_CHECKING:
    from .metric_wrapper import MetricWrapper


logger = get_logger(__name__)

_current_wrapper: ContextVar[Optional["MetricWrapper"]] = ContextVar("signalfx_metric_wrapper", default=None)


def set_wrapper(wrapper: "MetricWrapper") -> Token:
    """Register wrapper as current; the token restores the previous one"""
    return _current_wrapper.set(wrapper)


def get_wrapper() -> Optional["MetricWrapper"]:
    return _current_wrapper.get()


def clear_wrapper(wrapper: "MetricWrapper", token: Optional[Token] = None) -> None:
    """Unregister wrapper if it is still the current one

    With the token from set_wrapper, the previously registered wrapper
    becomes current again.
    """
    if _current_wrapper.get() is not wrapper:
        return
    if token is not None:
        try:
            _current_wrapper.reset(token)
            return
        except ValueError:
            # Token was created in another context
            pass
    _current_wrapper.set(None)


def send_metric(measurement: Measurement) -> bool:
    """Send a measurement verbatim through the current wrapper's session

    Returns False when no open wrapper is registered in this context.
    """
    wrapper = get_wrapper()
    if wrapper is None or wrapper.session.closed:
        logger.debug("No active metric wrapper, dropping measurement", metric=measurement.name)
        return False
    wrapper.session.set_datapoint(measurement)
    return True


def send_event(event: Event) -> bool:
    """Send an event verbatim through the current wrapper's session"""
    wrapper = get_wrapper()
    if wrapper is None or wrapper.session.closed:
        logger.debug("No active metric wrapper, dropping event", event_type=event.event_type)
        return False
    wrapper.session.set_event(event)
    return True
