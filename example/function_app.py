"""Hello-SignalFx HTTP function

Invoke with either:
1. curl -d "HTTP Body" {your host}/api/hello
2. curl {your host}/api/hello?name=HTTP%20Query
"""
import random
import azure.functions as func
from metrics.models import Measurement
from wrapper import MetricWrapper, metric_sender
from logging_config import get_logger


logger = get_logger(__name__)


def main(req: func.HttpRequest, context: func.Context) -> func.HttpResponse:
    with MetricWrapper(context) as wrapper:
        try:
            name = req.get_body().decode("utf-8") or req.params.get("name")

            metric_sender.send_metric(Measurement.gauge("application.metric", random.random() * 100))

            if not name:
                return func.HttpResponse(
                    "Please pass a name on the query string or in the request body",
                    status_code=400
                )
            return func.HttpResponse(f"Hello, {name}", status_code=200)
        except Exception as e:
            logger.warning("Handler failed", error=str(e))
            wrapper.error()
    return func.HttpResponse("Hello", status_code=200)
