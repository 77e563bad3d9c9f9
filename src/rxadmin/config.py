"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="RXADMIN_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Rx Distribution Admin API"
    api_prefix: str = "/api"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    mongodb_uri: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection string.",
    )
    mongodb_db_name: str = Field(default="rxadmin", description="Database holding all collections.")
    mongodb_max_pool_size: int = Field(default=10, ge=1)
    mongodb_server_selection_timeout_ms: int = Field(default=5000, ge=0)
    mongodb_socket_timeout_ms: int = Field(default=45000, ge=0)

    jwt_secret: str = Field(
        default="change-me",
        description="Secret used to sign bearer tokens.",
    )
    jwt_algorithm: str = Field(default="HS256")
    bcrypt_rounds: int = Field(default=10, ge=4, le=16)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Shopify store backing product and order sync
    shopify_store_url: Optional[str] = Field(
        default=None,
        description="Store domain (e.g., my-store.myshopify.com); https:// is added when missing.",
    )
    shopify_access_token: Optional[str] = Field(default=None, description="Admin API access token.")
    shopify_api_version: str = Field(default="2024-01")
    shopify_timeout_seconds: float = Field(default=30.0, gt=0.0)
    shopify_max_retries: int = Field(default=2, ge=0)
    shopify_backoff_seconds: float = Field(default=1.0, ge=0.0)

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

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


settings = Settings()
