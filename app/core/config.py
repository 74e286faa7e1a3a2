"""
Application configuration management using Pydantic Settings.
All settings can be overridden via environment variables.
"""

from typing import Any, List

from pydantic import AnyHttpUrl, field_validator
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
    PROJECT_NAME: str = "Catalog API"
    VERSION: str = "0.1.0"
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Database
    DATABASE_URL: str | None = None  # e.g. sqlite:///./data/dev.db
    POSTGRES_SERVER: str | None = None
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str | None = None
    POSTGRES_PASSWORD: str | None = None
    POSTGRES_DB: str | None = None

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Get database URI - supports both SQLite and PostgreSQL."""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        if self.POSTGRES_SERVER and self.POSTGRES_USER and self.POSTGRES_PASSWORD and self.POSTGRES_DB:
            return (
                f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )

        return "sqlite:///./catalog.db"

    # Redis
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str | None = None
    REDIS_SOCKET_TIMEOUT: float = 2.0

    # Cache policy (seconds)
    CACHE_DETAIL_TTL_SECONDS: int = 30 * 60
    CACHE_LIST_TTL_SECONDS: int = 5 * 60
    CACHE_REFRESH_TTL_SECONDS: int = 15 * 60
    CACHE_REFRESH_INTERVAL_SECONDS: int = 10
    CACHE_REFRESH_ENABLED: bool = True

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # CORS
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Any) -> List[str] | str:
        """Parse CORS origins from string or list."""
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # First master admin (created on startup)
    DISABLE_BOOTSTRAP_USERS: bool = False
    FIRST_SUPERUSER_NAME: str = "Master Admin"
    FIRST_SUPERUSER_EMAIL: str = "admin@example.com"
    FIRST_SUPERUSER_PASSWORD: str = "changethis"  # Max 72 bytes for bcrypt

    @field_validator("FIRST_SUPERUSER_PASSWORD", mode="after")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        """Validate password length for bcrypt (max 72 bytes)."""
        if v and len(v.encode("utf-8")) > 72:
            raise ValueError(
                f"FIRST_SUPERUSER_PASSWORD is too long ({len(v.encode('utf-8'))} bytes). "
                "Bcrypt has a maximum of 72 bytes. Please use a shorter password."
            )
        return v


settings = Settings()  # type: ignore
