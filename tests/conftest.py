"""Shared fixtures: clean environment, fake context and recording transports"""
from typing import List
import pytest
import structlog

from metrics.exporters.base import BaseReceiver, BaseReceiverFactory
from metrics.models import MetricsCloseError, SendError
from wrapper import metric_sender
import wrapper.metric_wrapper as metric_wrapper_module


ENV_VARS = [
    "SIGNALFX_AUTH_TOKEN",
    "SIGNALFX_API_HOSTNAME",
    "SIGNALFX_API_PORT",
    "SIGNALFX_API_SCHEME",
    "SIGNALFX_SEND_TIMEOUT",
    "WEBSITE_SITE_NAME",
    "APP_POOL_ID",
    "REGION_NAME",
    "LOG_LEVEL",
    "ENVIRONMENT",
]


class FakeContext:
    """Minimal stand-in for azure.functions.Context"""

    def __init__(self, function_name="Hello-SignalFx", invocation_id="inv-1"):
        self.function_name = function_name
        self.invocation_id = invocation_id


class RecordingReceiver(BaseReceiver):
    """Receiver that records batches instead of posting them"""

    def __init__(self, url: str, timeout_ms: int, transport: "FakeTransport"):
        super().__init__(url, timeout_ms)
        self.transport = transport
        self.batches: List[list] = []
        self.close_count = 0

    def encode(self, items):
        return b""

    def send(self, auth_token, items):
        if self.transport.send_error:
            raise SendError("boom", url=self.url, item_count=len(items))
        self.batches.append((auth_token, list(items)))

    def close(self):
        self.close_count += 1
        super().close()
        if self.transport.close_error:
            raise MetricsCloseError("transport release failed")

    @property
    def items(self) -> list:
        return [item for _, batch in self.batches for item in batch]


class FakeTransport:
    """Collects every receiver created through the fake factories"""

    def __init__(self):
        self.datapoint_receivers: List[RecordingReceiver] = []
        self.event_receivers: List[RecordingReceiver] = []
        self.send_error = False
        self.close_error = False

    def factory(self, kind: str):
        transport = self

        class Factory(BaseReceiverFactory):
            def create_receiver(self):
                url = self.endpoint.datapoint_url if kind == "datapoint" else self.endpoint.event_url
                receiver = RecordingReceiver(url, self.timeout_ms, transport)
                getattr(transport, f"{kind}_receivers").append(receiver)
                return receiver

        return Factory

    @property
    def datapoints(self) -> list:
        return [item for r in self.datapoint_receivers for item in r.items]

    @property
    def events(self) -> list:
        return [item for r in self.event_receivers for item in r.items]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the host environment and any .env file"""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture(autouse=True)
def reset_state():
    metric_sender._current_wrapper.set(None)
    yield
    metric_sender._current_wrapper.set(None)
    structlog.reset_defaults()


@pytest.fixture
def context():
    return FakeContext()


@pytest.fixture
def transport(monkeypatch):
    """Replace the wrapper's HTTP receiver factories with recording fakes"""
    fake = FakeTransport()
    monkeypatch.setattr(metric_wrapper_module, "OTLPDataPointReceiverFactory", fake.factory("datapoint"))
    monkeypatch.setattr(metric_wrapper_module, "JSONEventReceiverFactory", fake.factory("event"))
    return fake
