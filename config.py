"""Configuration for the SignalFx Azure Functions wrapper"""
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SEND_TIMEOUT_MS = 2000
DEFAULT_API_HOSTNAME = "pops.signalfx.com"
DEFAULT_API_PORT = 443
DEFAULT_API_SCHEME = "https"


class Config(BaseSettings):
    """Environment-backed settings read once per wrapper instance"""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # SignalFx ingest settings
    signalfx_auth_token: Optional[str] = Field(default=None, description="SignalFx access token")
    signalfx_api_hostname: str = Field(default=DEFAULT_API_HOSTNAME, description="Ingest hostname")
    signalfx_api_port: int = Field(default=DEFAULT_API_PORT, description="Ingest port")
    signalfx_api_scheme: str = Field(default=DEFAULT_API_SCHEME, description="Ingest URL scheme")
    signalfx_send_timeout: int = Field(
        default=DEFAULT_SEND_TIMEOUT_MS,
        description="Per-send timeout in milliseconds"
    )

    # Azure App Service environment
    website_site_name: Optional[str] = Field(default=None, description="Function app name")
    app_pool_id: Optional[str] = Field(default=None, description="App pool id, used when the site name is missing")
    region_name: Optional[str] = Field(default=None, description="Region display name, e.g. 'East US 2'")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    environment: str = Field(default="production", description="'development' enables console log output")

    @field_validator("signalfx_send_timeout", mode="before")
    @classmethod
    def parse_send_timeout(cls, v):
        return _int_or_default(v, DEFAULT_SEND_TIMEOUT_MS)

    @field_validator("signalfx_api_port", mode="before")
    @classmethod
    def parse_api_port(cls, v):
        port = _int_or_default(v, DEFAULT_API_PORT)
        return port if 0 < port <= 65535 else DEFAULT_API_PORT

    @field_validator("signalfx_api_hostname", "signalfx_api_scheme", mode="before")
    @classmethod
    def blank_as_default(cls, v, info):
        if v is None or not str(v).strip():
            return cls.model_fields[info.field_name].default
        return str(v).strip()

    @property
    def send_timeout_seconds(self) -> float:
        """Send timeout in the unit requests expects"""
        return self.signalfx_send_timeout / 1000.0

    @property
    def resource_name(self) -> Optional[str]:
        """Site name, falling back to the app pool id"""
        return self.website_site_name or self.app_pool_id or None

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


def _int_or_default(value, default: int) -> int:
    # Malformed or non-positive values never surface as errors
    if value is None or isinstance(value, bool):
        return default
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default
