"""
File: config.py
Purpose: Centralized configuration using environment variables (12-factor).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised for invalid wiring at startup (duplicate metrics, bad collector endpoint)."""


class Settings(BaseSettings):
    """Load service configuration from environment variables."""
    ENV: str = "dev"
    SERVICE_NAME: str = "demo-app"
    LOG_LEVEL: str = "INFO"

    # HTTP server
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Tracing (OTLP over HTTP, e.g. Tempo)
    TRACING_ENABLED: bool = True
    OTLP_ENDPOINT: str = "tempo:4318"
    OTLP_TIMEOUT_SECS: float = 5.0
    TRACE_SHUTDOWN_TIMEOUT_SECS: float = 5.0

    # /slow delay window in milliseconds
    SLOW_MIN_MS: int = 100
    SLOW_MAX_MS: int = 1500

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return settings
