"""Wire receivers for datapoints and events"""
from .base import BaseReceiver, BaseReceiverFactory
from .events import JSONEventReceiver, JSONEventReceiverFactory
from .otlp_http import OTLPDataPointReceiver, OTLPDataPointReceiverFactory

__all__ = [
    'BaseReceiver',
    'BaseReceiverFactory',
    'JSONEventReceiver',
    'JSONEventReceiverFactory',
    'OTLPDataPointReceiver',
    'OTLPDataPointReceiverFactory',
]
