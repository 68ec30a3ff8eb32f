"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # WHOOP OAuth
    WHOOP_CLIENT_ID: str = ""
    WHOOP_CLIENT_SECRET: str = ""
    WHOOP_REDIRECT_URI: str = "http://localhost:8000/api/auth/callback"

    # Current tokens (replaced in memory on refresh)
    WHOOP_ACCESS_TOKEN: str = ""
    WHOOP_REFRESH_TOKEN: str = ""
    WHOOP_TOKEN_EXPIRES_AT: int = 0  # unix ms, 0 = unknown
    TOKEN_REFRESH_MARGIN_SECONDS: int = 5 * 60

    # WHOOP API URLs
    WHOOP_AUTH_URL: str = "https://api.prod.whoop.com/oauth/oauth2/auth"
    WHOOP_TOKEN_URL: str = "https://api.prod.whoop.com/oauth/oauth2/token"
    WHOOP_API_BASE_URL: str = "https://api.prod.whoop.com/developer/v2"

    # Retry policy for rate-limited requests
    WHOOP_MAX_RETRIES: int = 3
    WHOOP_RETRY_DELAY: float = 1.0  # seconds, doubled per retry
    WHOOP_REQUEST_TIMEOUT: float = 30.0

    # Notes output
    VAULT_PATH: str = "."
    OUTPUT_FOLDER: str = "Health/WHOOP"
    PERSONA_DAYS: int = 30
    BACKFILL_DEFAULT_DAYS: int = 7

    LOG_LEVEL: str = "INFO"

    # Frontend URL for CORS
    FRONTEND_URL: str = "http://localhost:5173"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Create a global settings instance for direct import
settings = get_settings()
