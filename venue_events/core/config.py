"""
Client configuration using pydantic-settings.
All config is loaded from environment variables with sensible defaults.
"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Venue Events Client"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Remote API
    API_BASE_URL: str = "http://localhost:8000"
    API_PREFIX: str = "/api/LocationEvent"
    REQUEST_TIMEOUT: float = 30.0
    API_TOKEN: Optional[str] = None  # Static bearer token, mostly for scripts

    # Event rules
    EVENT_START_GRACE_SECONDS: int = 60  # Start date may lag "now" by this much

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
