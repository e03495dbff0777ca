"""JSON event receiver for the SignalFx ingest API"""
import json
from typing import List
from metrics.models import Event
from .base import BaseReceiver, BaseReceiverFactory


class JSONEventReceiver(BaseReceiver[Event]):
    content_type = "application/json"

    def encode(self, items: List[Event]) -> bytes:
        return json.dumps([event.to_dict() for event in items]).encode("utf-8")


class JSONEventReceiverFactory(BaseReceiverFactory):
    def create_receiver(self) -> JSONEventReceiver:
        return JSONEventReceiver(self.endpoint.event_url, self.timeout_ms)
