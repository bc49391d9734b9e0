"""Application settings and configuration."""

from typing import Literal

from pydantic import Field, model_validator  # type: ignore
from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore

DEFAULT_DATABASE_URL = "sqlite:///./learnhub.db"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    ENV: Literal["dev", "staging", "prod", "test"] = Field(default="dev")
    PROJECT_NAME: str = Field(default="LearnHub Gamification API")

    # API
    API_PREFIX: str = Field(default="/v1")

    # Database
    DATABASE_URL: str = Field(default=DEFAULT_DATABASE_URL)

    # Redis
    REDIS_URL: str | None = Field(default=None)
    REDIS_ENABLED: bool = Field(default=False)
    REDIS_REQUIRED: bool = Field(default=False)

    # CORS - Accept string or list, will be normalized to list
    CORS_ORIGINS: str | list[str] = Field(default="http://localhost:3000,http://localhost:5173")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    # Gamification
    TREND_SNAPSHOT_BACKEND: Literal["sql", "redis"] = Field(default="sql")
    SNAPSHOT_LOCK_TTL: int = Field(default=5)  # seconds
    MENTOR_BONUS_RATE: float = Field(default=0.1, ge=0.0, le=1.0)

    @model_validator(mode="before")
    @classmethod
    def parse_cors_origins(cls, data):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(data, dict) and "CORS_ORIGINS" in data:
            cors_origins = data["CORS_ORIGINS"]
            if isinstance(cors_origins, str):
                data["CORS_ORIGINS"] = [
                    origin.strip() for origin in cors_origins.split(",") if origin.strip()
                ]
        return data

    def __init__(self, **kwargs):
        """Validate settings on initialization."""
        super().__init__(**kwargs)
        # Values read from the environment bypass the "before" validator
        if isinstance(self.CORS_ORIGINS, str):
            object.__setattr__(
                self,
                "CORS_ORIGINS",
                [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()],
            )
        # Fail fast in production if critical vars are missing
        if self.ENV == "prod":
            if not self.DATABASE_URL or self.DATABASE_URL == DEFAULT_DATABASE_URL:
                raise ValueError("DATABASE_URL must be set in production")
            if self.REDIS_ENABLED and not self.REDIS_URL:
                raise ValueError("REDIS_URL must be set in production when REDIS_ENABLED=true")
            if self.REDIS_ENABLED:
                self.REDIS_REQUIRED = True
        if self.TREND_SNAPSHOT_BACKEND == "redis" and not self.REDIS_ENABLED:
            raise ValueError("TREND_SNAPSHOT_BACKEND=redis requires REDIS_ENABLED=true")


# Global settings instance
settings = Settings()
