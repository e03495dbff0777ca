"""SignalFx metric wrapper for Azure Functions"""
from . import metric_sender
from .decorator import with_metrics
from .metric_wrapper import (
    METRIC_NAME_DURATION,
    METRIC_NAME_ERRORS,
    METRIC_NAME_INVOCATIONS,
    MetricWrapper,
)

__all__ = [
    'MetricWrapper',
    'metric_sender',
    'with_metrics',
    'METRIC_NAME_INVOCATIONS',
    'METRIC_NAME_ERRORS',
    'METRIC_NAME_DURATION'
]
