"""
Application configuration using Pydantic settings.

Usage:
    from queuehub.config import get_settings
    settings = get_settings()

Store connection details are not settings: they are passed to
QueueHandler.create() (see queuehub.schema). For fixed names and message
templates, import from queuehub.constants.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from queuehub.constants import SERVICES_INFO_KEY, TIMESTAMP_FORMAT


class Settings(BaseSettings):
    """
    Library settings loaded from environment variables and .env file.

    Every variable is prefixed with QUEUEHUB_, e.g. QUEUEHUB_LOG_LEVEL=DEBUG.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # App settings
    app_name: str = "queuehub"
    debug: bool = Field(default=False, validation_alias="QUEUEHUB_DEBUG")
    env: str = Field(default="development", validation_alias="QUEUEHUB_ENV")
    log_level: str = Field(default="INFO", validation_alias="QUEUEHUB_LOG_LEVEL")

    # Registration bookkeeping
    services_info_key: str = Field(default=SERVICES_INFO_KEY, validation_alias="QUEUEHUB_SERVICES_INFO_KEY")
    timestamp_format: str = Field(default=TIMESTAMP_FORMAT, validation_alias="QUEUEHUB_TIMESTAMP_FORMAT")

    # Insert validation
    require_target_type: bool = Field(default=True, validation_alias="QUEUEHUB_REQUIRE_TARGET_TYPE")

    # Redis driver
    redis_socket_timeout: float = Field(default=5.0, validation_alias="QUEUEHUB_REDIS_SOCKET_TIMEOUT")
    redis_socket_connect_timeout: float = Field(default=5.0, validation_alias="QUEUEHUB_REDIS_CONNECT_TIMEOUT")
    redis_max_connections: int = Field(default=50, validation_alias="QUEUEHUB_REDIS_MAX_CONNECTIONS")

    # CLI
    config_file: Optional[str] = Field(default=None, validation_alias="QUEUEHUB_CONFIG")

    @field_validator("services_info_key")
    @classmethod
    def validate_services_info_key(cls, v: str) -> str:
        """The reserved group must be a usable hash name."""
        if not v.strip():
            raise ValueError("QUEUEHUB_SERVICES_INFO_KEY cannot be blank")
        return v.strip()

    @field_validator("redis_max_connections")
    @classmethod
    def validate_max_connections(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"QUEUEHUB_REDIS_MAX_CONNECTIONS must be positive (got {v})")
        return v

    @property
    def is_development(self) -> bool:
        return self.debug or self.env.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


__all__ = ["Settings", "get_settings"]
