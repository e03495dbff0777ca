"""SignalFx ingest endpoint descriptor"""
from dataclasses import dataclass
from config import Config, DEFAULT_API_HOSTNAME, DEFAULT_API_PORT, DEFAULT_API_SCHEME

DATAPOINT_PATH = "/v2/datapoint/otlp"
EVENT_PATH = "/v2/event"

_DEFAULT_PORTS = {"https": 443, "http": 80}


@dataclass(frozen=True)
class SignalFxEndpoint:
    """Scheme, host and port of the ingest API"""
    scheme: str = DEFAULT_API_SCHEME
    hostname: str = DEFAULT_API_HOSTNAME
    port: int = DEFAULT_API_PORT

    @classmethod
    def from_config(cls, config: Config) -> "SignalFxEndpoint":
        return cls(
            scheme=config.signalfx_api_scheme.lower(),
            hostname=config.signalfx_api_hostname,
            port=config.signalfx_api_port,
        )

    @property
    def base_url(self) -> str:
        if _DEFAULT_PORTS.get(self.scheme) == self.port:
            return f"{self.scheme}://{self.hostname}"
        return f"{self.scheme}://{self.hostname}:{self.port}"

    @property
    def datapoint_url(self) -> str:
        return self.base_url + DATAPOINT_PATH

    @property
    def event_url(self) -> str:
        return self.base_url + EVENT_PATH
