from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Lexora Standards API"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True

    # Security
    log_user_emails: bool = False  # Keep disabled in production (GDPR)
    csp_production: str = "default-src 'self'; frame-ancestors 'none'"

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Access / refresh tokens
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 1 day
    refresh_token_expire_days: int = 7

    # Magic link
    magic_link_expire_minutes: int = 15
    magic_link_replay_window_seconds: int = 300
    magic_link_replay_cache_size: int = 10000

    # Server-side sessions
    session_secret_key: str
    session_cookie_name: str = "sid"
    session_ttl_hours: int = 24
    session_cookie_secure: bool | None = None  # None -> secure only in production

    # URLs
    app_url: str = "http://localhost:3000"  # Frontend
    api_base_url: str = "http://localhost:3002"  # Used for magic-link and OAuth callbacks
    post_login_redirect: str = "/dashboard"
    login_failure_redirect: str = "/login"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Email (Resend)
    resend_api_key: str | None = None  # If not set, emails are logged but not sent
    email_from: str = "noreply@lexora.io"
    email_send_timeout_seconds: int = 10

    # OAuth providers
    google_client_id: str | None = None
    google_client_secret: str | None = None
    microsoft_client_id: str | None = None
    microsoft_client_secret: str | None = None
    microsoft_tenant_id: str | None = None

    # Redis (optional - app works without it)
    redis_url: str | None = None
    redis_pool_size: int = 10

    # Metrics
    metrics_api_key: str | None = None

    @field_validator("jwt_secret_key", "session_secret_key")
    @classmethod
    def validate_secret(cls, v: str) -> str:
        if v == "change-this-to-a-secure-random-string":
            raise ValueError(
                "Secret keys must be changed from the default value. "
                "Generate a secure secret with: openssl rand -hex 32"
            )
        if len(v) < 32:
            raise ValueError("Secret keys must be at least 32 characters")
        return v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """Reject wildcards since credentials (session cookie) are allowed."""
        for origin in v:
            if origin == "*":
                raise ValueError(
                    "CORS wildcard '*' is not allowed when allow_credentials=True. "
                    "Specify explicit origins instead."
                )
        return v

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def secure_cookies(self) -> bool:
        if self.session_cookie_secure is not None:
            return self.session_cookie_secure
        return self.is_production


@lru_cache
def get_settings() -> Settings:
    return Settings()
