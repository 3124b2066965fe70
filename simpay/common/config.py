"""Central environment-driven settings shared by the client and the gateway.

The gateway process loads this once at startup. Client behavior is controlled by
the `PAYMENTS_*` environment variables (see `.env.example`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "simpay"
    log_level: str = "INFO"
    payments_api_key: str = ""
    payments_mode: str = "live"
    payments_environment: str = "sandbox"
    payments_debug: bool = False
    payments_max_retries: int | None = None
    payments_backoff_ms: int | None = None
    payments_rate_limit_max_attempts: int | None = None
    payments_rate_limit_window_ms: int | None = None
    database_url: str = "sqlite:///./simpay.db"
    otel_exporter_otlp_endpoint: str | None = None
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = CommonSettings()
