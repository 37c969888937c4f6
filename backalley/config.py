"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single frozen instance per process
    - PASSWORD_PEPPER must be present and non-empty, else ConfigurationMissingError

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from backalley.core.errors import ConfigurationMissingError


def async_database_url(url: str) -> str:
    """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, frozen=True, extra="ignore",
    )

    # Database
    database_url: str = (
        "postgresql+asyncpg://backalley:backalley@db:5432/backalley"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        return async_database_url(v) if isinstance(v, str) else v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    # create_all on startup instead of alembic (local development only)
    database_create_all: bool = False

    # Credentials
    password_pepper: str
    bcrypt_rounds: int = 12

    @field_validator("password_pepper")
    @classmethod
    def pepper_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("password_pepper must not be empty")
        return v

    # Sessions
    session_ttl_seconds: int = 3600 * 24
    session_cookie_name: str = "auth_session"

    # Invites
    invite_quota_default: int = 3

    # Anti-abuse
    content_cooldown_seconds: int = 30
    auth_rate_limit: int = 15
    auth_rate_period_seconds: int = 60
    post_rate_limit: int = 15
    post_rate_period_seconds: int = 60

    # Object storage (image uploads)
    s3_endpoint: str = "http://localhost:9000"
    s3_bucket: str = "csc"
    s3_region: str = "us-east-1"
    s3_public_base_url: str = "http://localhost:9000/csc"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    image_max_bytes: int = 5 * 1024 * 1024
    image_quota_per_author: int = 100
    image_url_ttl_seconds: int = 600

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def session_ttl(self) -> timedelta:
        return timedelta(seconds=self.session_ttl_seconds)

    @property
    def content_cooldown(self) -> timedelta:
        return timedelta(seconds=self.content_cooldown_seconds)


def load_settings(**overrides) -> Settings:
    """Build settings, turning a missing/blank pepper into ConfigurationMissingError."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        for err in e.errors():
            if "password_pepper" in err.get("loc", ()):
                raise ConfigurationMissingError("password_pepper") from e
        raise


@lru_cache
def get_settings() -> Settings:
    return load_settings()
