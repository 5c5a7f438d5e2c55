"""Configuration management using pydantic-settings."""

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    database_path: str = "./data/gamecard.db"
    api_prefix: str = "/api"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:3001"]

    # "production" turns on Secure cookies
    environment: str = "development"

    # JWT Configuration
    jwt_secret_key: str = "change-me-in-production-use-a-long-random-env-var"
    jwt_algorithm: str = "HS256"
    access_token_expiry_minutes: int = 15
    refresh_token_expiry_days: int = 1

    # Refresh token cookie; the path defaults to "{api_prefix}/auth"
    refresh_cookie_name: str = "refresh_token"
    refresh_cookie_path: str | None = None

    # Per-client rate limits (Flask-Limiter notation)
    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"
    register_rate_limit: str = "5 per 15 minutes"
    login_rate_limit: str = "3 per 15 minutes"

    # Bcrypt work factor (higher = more secure but slower)
    # For tests, use 4 for faster execution while maintaining functionality
    bcrypt_work_factor: int = 12

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False
    )

    @model_validator(mode="after")
    def default_cookie_path(self) -> "Settings":
        if self.refresh_cookie_path is None:
            self.refresh_cookie_path = f"{self.api_prefix.rstrip('/')}/auth"
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
