"""Tests for the with_metrics decorator"""
import asyncio
import os
from unittest.mock import patch
import pytest
from structlog.testing import capture_logs

from metrics.models import Measurement
from wrapper import METRIC_NAME_DURATION, METRIC_NAME_ERRORS, METRIC_NAME_INVOCATIONS, metric_sender, with_metrics
from wrapper.decorator import find_context
from conftest import FakeContext


class TestWithMetrics:
    """Test decorated sync and async handlers"""

    def test_sync_success(self, transport, context):
        @with_metrics
        def handler(req, context):
            metric_sender.send_metric(Measurement.gauge("application.metric", 3.0))
            return f"Hello, {req}"

        assert handler("world", context) == "Hello, world"

        names = [m.name for m in transport.datapoints]
        assert names == [METRIC_NAME_INVOCATIONS, "application.metric", METRIC_NAME_DURATION]
        assert dict(transport.datapoints[0].labels)["azure_function_name"] == "Hello-SignalFx"

    def test_sync_error_counted_and_reraised(self, transport, context):
        @with_metrics(auth_token="token")
        def handler(req, context):
            raise RuntimeError("exceptionOutput")

        with pytest.raises(RuntimeError, match="exceptionOutput"):
            handler("correctInput", context=context)

        names = [m.name for m in transport.datapoints]
        assert names == [METRIC_NAME_INVOCATIONS, METRIC_NAME_ERRORS, METRIC_NAME_DURATION]
        assert metric_sender.get_wrapper() is None

    def test_async_handler(self, transport, context):
        @with_metrics(dimensions={"team": "a"})
        async def handler(req, context):
            await asyncio.sleep(0)
            return "done"

        assert asyncio.run(handler("x", context)) == "done"

        assert [m.name for m in transport.datapoints] == [METRIC_NAME_INVOCATIONS, METRIC_NAME_DURATION]
        assert ("team", "a") in transport.datapoints[0].labels

    def test_async_error(self, transport, context):
        @with_metrics
        async def handler(context):
            raise ValueError("bad")

        with pytest.raises(ValueError):
            asyncio.run(handler(context))

        assert METRIC_NAME_ERRORS in [m.name for m in transport.datapoints]

    def test_close_failure_does_not_abort_handler(self, transport, context):
        transport.close_error = True

        @with_metrics
        def handler(context):
            return 200

        with capture_logs() as logs:
            assert handler(context) == 200

        assert any(entry["event"] == "Exception thrown closing wrapper" for entry in logs)

    def test_zero_timeout_handler_completes(self, context):
        @with_metrics
        def handler(context):
            return 200

        with patch.dict(os.environ, {"SIGNALFX_SEND_TIMEOUT": "0"}):
            with patch("requests.Session.post") as mock_post:
                mock_post.return_value.ok = True
                assert handler(context) == 200

        assert mock_post.call_args.kwargs["timeout"] > 0

    def test_preserves_metadata(self):
        @with_metrics
        def handler(context):
            """Docs"""

        assert handler.__name__ == "handler"
        assert handler.__doc__ == "Docs"


class TestFindContext:

    def test_keyword(self):
        ctx = FakeContext()
        assert find_context((), {"context": ctx}) is ctx

    def test_positional(self):
        ctx = FakeContext()
        assert find_context(("req", ctx), {}) is ctx

    def test_missing(self):
        assert find_context(("req",), {}) is None
