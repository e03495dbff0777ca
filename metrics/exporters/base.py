"""Base receiver interface and factory"""
import abc
from typing import Generic, List, TypeVar
import requests
from metrics.endpoint import SignalFxEndpoint
from metrics.models import MetricsCloseError, SendError
from logging_config import get_logger


logger = get_logger(__name__)

T = TypeVar("T")

AUTH_HEADER = "X-SF-Token"


class BaseReceiver(abc.ABC, Generic[T]):
    """Sends one batch per call to an ingest URL over a pooled HTTP session"""

    content_type: str = "application/octet-stream"

    def __init__(self, url: str, timeout_ms: int):
        self.url = url
        self.timeout_ms = timeout_ms
        self._http = requests.Session()

    @abc.abstractmethod
    def encode(self, items: List[T]) -> bytes:
        """Serialize a batch for the wire"""
        pass

    def send(self, auth_token: str, items: List[T]) -> None:
        """POST a batch; raise SendError on any transport or HTTP failure"""
        if not items:
            return

        headers = {"Content-Type": self.content_type}
        if auth_token:
            headers[AUTH_HEADER] = auth_token

        try:
            response = self._http.post(
                self.url,
                data=self.encode(items),
                headers=headers,
                timeout=self.timeout_ms / 1000.0,
            )
        except requests.RequestException as e:
            raise SendError(str(e), url=self.url, item_count=len(items)) from e
        except Exception as e:
            # Encoding and client argument errors are send failures too
            raise SendError(f"Failed to send batch: {e}", url=self.url, item_count=len(items)) from e

        if not response.ok:
            raise SendError(
                f"Ingest rejected batch: HTTP {response.status_code}",
                url=self.url,
                status_code=response.status_code,
                item_count=len(items),
            )

        logger.debug("Batch sent", url=self.url, item_count=len(items), event_type="batch_sent")

    def close(self) -> None:
        """Release the pooled HTTP connections"""
        try:
            self._http.close()
        except OSError as e:
            raise MetricsCloseError(f"Failed to close transport for {self.url}: {e}") from e


class BaseReceiverFactory(abc.ABC):
    """Creates receivers bound to one endpoint and timeout"""

    def __init__(self, endpoint: SignalFxEndpoint, timeout_ms: int):
        self.endpoint = endpoint
        self.timeout_ms = timeout_ms

    @abc.abstractmethod
    def create_receiver(self) -> BaseReceiver:
        pass
