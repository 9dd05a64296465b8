"""Application configuration"""
from datetime import timedelta
from functools import lru_cache
from typing import List, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings

_DEV_SESSION_SECRET = "dev-only-insecure-session-secret-change-me"


class Settings(BaseSettings):
    """Application settings.

    Loaded once at startup by :func:`get_settings` and read-only afterwards.
    Services receive the instance explicitly instead of reading the environment.
    """

    ENVIRONMENT: str = "development"  # development | production | test

    # Database
    DATABASE_URL: str = "sqlite:///./forms_admin.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_POOL_RECYCLE: int = 3600  # Recycle connections after 1 hour

    # Sessions
    SESSION_SECRET: Optional[str] = None
    SESSION_COOKIE_NAME: str = "forms_admin_sid"
    SESSION_TTL_SECONDS: int = 86400  # 24 hours, rolling

    # Public URL used to build reset / onboarding links
    BASE_URL: Optional[str] = None

    # Account lifecycle policy
    RESET_RL_PER_EMAIL_HOURLY: int = 3
    RESET_RL_PER_IP_HOURLY: int = 5
    RESET_TOKEN_TTL_MINUTES: int = 30
    ONBOARDING_TOKEN_TTL_HOURS: int = 168  # 7 days
    MAX_FAILED_LOGIN_ATTEMPTS: int = 5
    BCRYPT_ROUNDS: int = 12

    # Mail (SendGrid HTTP API); dev mode logs links when unset
    SENDGRID_API_KEY: Optional[str] = None
    SENDGRID_FROM_EMAIL: Optional[str] = None

    # Server
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: List[str] = ["100/minute", "1000/hour"]
    RATE_LIMIT_STORAGE_URI: str = "memory://"  # Use redis:// for production

    # Monitoring
    METRICS_ENABLED: bool = True
    METRICS_PATH: str = "/metrics"

    # Security
    TRUST_PROXY_HEADERS: bool = False  # Set True if behind reverse proxy

    class Config:
        env_file = ".env"
        case_sensitive = True
        frozen = True
        extra = "ignore"

    @model_validator(mode="after")
    def _check_production_requirements(self) -> "Settings":
        if self.SESSION_SECRET is not None and len(self.SESSION_SECRET) < 32:
            raise ValueError("SESSION_SECRET must be at least 32 characters")
        if self.is_production:
            if not self.SESSION_SECRET:
                raise ValueError("SESSION_SECRET is required in production")
            if not self.BASE_URL:
                raise ValueError("BASE_URL is required in production (e.g., https://yourdomain.com)")
        return self

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def session_secret(self) -> str:
        return self.SESSION_SECRET or _DEV_SESSION_SECRET

    @property
    def base_url(self) -> str:
        return (self.BASE_URL or "http://localhost:8000").rstrip("/")

    @property
    def sendgrid_configured(self) -> bool:
        return bool(self.SENDGRID_API_KEY and self.SENDGRID_FROM_EMAIL)

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def reset_token_ttl(self) -> timedelta:
        return timedelta(minutes=self.RESET_TOKEN_TTL_MINUTES)

    @property
    def onboarding_token_ttl(self) -> timedelta:
        return timedelta(hours=self.ONBOARDING_TOKEN_TTL_HOURS)


@lru_cache()
def get_settings() -> Settings:
    """Load settings once; every later call returns the same frozen instance."""
    return Settings()
