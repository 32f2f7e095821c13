"""Application configuration and settings management."""

from typing import Annotated, Any, Literal

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "VROOM ORS Directions API"
    app_version: str = "1.0.0"
    api_prefix: str = ""
    environment: Literal["development", "production", "test"] = "production"
    log_level: str = "INFO"

    ors_api_key: str = Field(default="", description="API key sent as the Authorization header to ORS.")
    ors_base_url: str = Field(
        default="http://localhost:8080",
        description="Base URL for the openrouteservice directions API.",
    )
    ors_max_retries: int = Field(default=3, ge=0)
    ors_backoff_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="First retry delay after a rate-limit response; doubled on every attempt.",
    )
    ors_timeout_seconds: float = Field(default=30.0, gt=0.0)

    vroom_endpoint: str = Field(
        default="http://localhost:3000",
        description="URL of the VROOM HTTP server receiving solve requests.",
    )
    vroom_timeout_seconds: float = Field(default=120.0, gt=0.0)

    default_profile: str = Field(
        default="driving-car",
        description="Matrix profile used when the request does not name one.",
    )
    matrix_max_concurrency: int = Field(default=10, ge=1)
    matrix_batch_pause_seconds: float = Field(default=0.1, ge=0.0)

    frontend_allowed_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=("*",),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("ors_base_url", "vroom_endpoint", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


settings = Settings()
