"""Configuration Management."""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Session settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="UITREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Backend
    root_url: str = Field(default="http://localhost:7860", description="App root URL")
    request_timeout: float = Field(default=30.0, gt=0, description="Remote call timeout")
    breaker_fail_max: int = Field(default=5, gt=0, description="Failures before breaker opens")
    breaker_reset_timeout: int = Field(default=30, gt=0, description="Breaker reset (seconds)")

    # Components
    component_package: str = Field(
        default="uitree_components", description="Package searched by ImportModuleSource"
    )

    # Scheduling
    frame_interval: float = Field(
        default=1 / 60, ge=0.0, description="Delay before a queued flush runs (seconds)"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
