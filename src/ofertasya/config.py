"""Configuration management using Pydantic Settings."""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEMO_API_KEY = "DEMO"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]

    # Database
    database_url: str = "sqlite:///./ofertas.db"

    # Driiveme marketplace
    driiveme_api_key: SecretStr | None = None
    driiveme_api_url: str = "https://www.driiveme.com/api/transport/list"
    http_timeout_seconds: float = 20.0

    # Polling
    poll_interval_seconds: float = 60.0

    # API
    recent_offers_limit: int = 50

    # Logging
    log_level: str = "INFO"

    @property
    def demo_mode(self) -> bool:
        """True when no usable marketplace credential is configured."""
        if self.driiveme_api_key is None:
            return True
        key = self.driiveme_api_key.get_secret_value().strip()
        return not key or key.upper() == DEMO_API_KEY


settings = Settings()
