"""Application configuration."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Backend
    backend_url: str
    backend_api_key: str
    request_timeout: float = 10.0

    # Menu source: "yaml" reads menu_file, "remote" queries the backend
    menu_source: str = "yaml"
    menu_file: Optional[str] = None

    # Pricing
    default_delivery_fee: float = 2.99
    currency: str = "DA"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
