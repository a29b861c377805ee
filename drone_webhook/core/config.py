"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="drone-webhook", alias="APP_NAME")
    app_env: str = Field(default="development", alias="APP_ENV")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Webhook delivery
    webhook_endpoint: str = Field(default="", alias="DRONE_WEBHOOK_ENDPOINT")
    webhook_secret: str = Field(default="", alias="DRONE_WEBHOOK_SECRET")
    webhook_timeout: float = Field(default=60.0, alias="DRONE_WEBHOOK_TIMEOUT")

    @field_validator("webhook_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("webhook timeout must be positive")
        return value

    @property
    def webhook_endpoints(self) -> list[str]:
        """Endpoint URLs in configured order, blanks dropped."""
        return [item.strip() for item in self.webhook_endpoint.split(",") if item.strip()]

    # Server (system descriptor attached to payloads)
    server_proto: str = Field(default="http", alias="DRONE_SERVER_PROTO")
    server_host: Optional[str] = Field(default=None, alias="DRONE_SERVER_HOST")
    server_version: Optional[str] = Field(default=None, alias="DRONE_VERSION")

    @property
    def system_link(self) -> Optional[str]:
        """Construct public base URL of the server."""
        if not self.server_host:
            return None
        return f"{self.server_proto}://{self.server_host}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
