"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables or a local .env file.
"""

from functools import lru_cache
from typing import Any, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "TeamVote"
    APP_ENV: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str = ""  # Required - loaded from environment

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_required_secrets(cls, v: str, info: Any) -> str:
        """Validate that required secrets are set."""
        if not v:
            raise ValueError(f"{info.field_name} must be set in environment")
        return v

    # Azure Cosmos DB
    # Either the endpoint (RBAC via DefaultAzureCredential) or a connection string
    # (local emulator) must be provided at runtime.
    AZURE_COSMOS_ENDPOINT: str | None = None
    AZURE_COSMOS_CONNECTION_STRING: str | None = None
    AZURE_COSMOS_DATABASE: str = "teamvote"
    AZURE_COSMOS_DISABLE_SSL: bool = False  # Emulator uses a self-signed cert

    # Store call limits
    COSMOS_TIMEOUT_SECONDS: float = 5.0
    COSMOS_RETRY_ATTEMPTS: int = 3
    COSMOS_RETRY_BACKOFF_SECONDS: float = 0.2

    # Authentication
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    ADMIN_OTP_EXPIRE_MINUTES: int = 10
    ADMIN_OTP_MAX_ATTEMPTS: int = 5  # Wrong guesses before the pending code is discarded

    # Voter identity policy:
    #   name  - login by display name, auto-verified (low-friction events)
    #   email - login by email, voting requires admin verification
    VOTER_IDENTITY_MODE: Literal["name", "email"] = "name"

    # CORS - stored as comma-separated string to avoid pydantic-settings JSON parsing issues
    CORS_ORIGINS: str = "http://localhost:3000"

    # Live notifications
    LIVE_QUEUE_SIZE: int = 100  # Per-subscriber buffer before messages are dropped

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        import json

        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def cosmos_configured(self) -> bool:
        """Check if Cosmos DB connection settings are present."""
        return bool(self.AZURE_COSMOS_ENDPOINT or self.AZURE_COSMOS_CONNECTION_STRING)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
