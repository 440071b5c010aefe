"""Application configuration using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pyrislive.protocol.requests import Filter
from pyrislive.protocol.ris import RISMessageType


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # RIS Live connection
    ris_live_url: str = Field(
        default="wss://ris-live.ripe.net/v1/ws/", description="RIS Live websocket URL"
    )
    ris_live_client: str = Field(
        default="pyrislive", description="Client name reported to RIS Live"
    )
    reconnect_delay: float = Field(
        default=5.0, ge=0.0, description="Seconds to wait before reconnecting"
    )
    ping_interval: float = Field(
        default=30.0, ge=0.0, description="Seconds between ping requests (0 disables)"
    )

    # Workers
    worker_count: int = Field(default=1, ge=1, le=64, description="Decode workers")
    queue_size: int = Field(
        default=0, ge=0, description="Raw message queue size (0 = unbounded)"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    stats_log_interval: float = Field(
        default=60.0, gt=0.0, description="Seconds between statistics log lines"
    )

    # Subscription filter (unset fields are not sent)
    filter_host: str | None = Field(default=None, description="Collector, e.g. rrc01")
    filter_type: RISMessageType | None = Field(
        default=None, description="BGP message type, e.g. UPDATE"
    )
    filter_require: str | None = Field(
        default=None, description="Require key, e.g. announcements"
    )
    filter_peer: str | None = Field(default=None, description="BGP peer IP address")
    filter_path: str | None = Field(default=None, description="AS path pattern")
    filter_prefix: str | None = Field(default=None, description="Prefix in CIDR form")
    filter_more_specific: bool = Field(
        default=True, description="Match more specific prefixes (with filter_prefix)"
    )
    filter_less_specific: bool = Field(
        default=False, description="Match less specific prefixes (with filter_prefix)"
    )
    include_raw: bool | None = Field(
        default=None, description="Ask for hex-encoded raw BGP messages"
    )

    # Sentry (optional)
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN (leave empty to disable)"
    )
    sentry_environment: str = Field(
        default="development", description="Sentry environment"
    )
    sentry_traces_sample_rate: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Sentry traces sample rate"
    )

    def build_filter(self) -> Filter:
        """Build the subscription filter from the configured filter settings."""
        subscribe_filter = Filter()

        if self.filter_host is not None:
            subscribe_filter.set_host(self.filter_host)
        if self.filter_type is not None:
            subscribe_filter.set_msg_type(self.filter_type)
        if self.filter_require is not None:
            subscribe_filter.set_require(self.filter_require)
        if self.filter_peer is not None:
            subscribe_filter.set_peer(self.filter_peer)
        if self.filter_path is not None:
            subscribe_filter.set_path(self.filter_path)
        if self.filter_prefix is not None:
            subscribe_filter.set_prefix(
                self.filter_prefix,
                self.filter_more_specific,
                self.filter_less_specific,
            )
        if self.include_raw is not None:
            subscribe_filter.set_socket_options(self.include_raw)

        return subscribe_filter


# Global settings instance
settings = Settings()
