# rural_health/config.py - environment-driven configuration
from dotenv import load_dotenv

load_dotenv()
from typing import Union
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


DEFAULT_CORS_ORIGINS = ("http://localhost:5173", "http://localhost:3000")
SUPPORTED_DATABASE_SCHEMES = ("postgresql://", "postgresql+psycopg2://", "sqlite://")
MIN_SECRET_KEY_LENGTH = 32


class Settings(BaseSettings):
    """Clinic service settings; environment variables win over `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    # Application
    app_name: str = Field(default="Rural Health Clinic Manager", alias="APP_NAME")
    app_version: str = "1.0.0"
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database
    database_url: str = Field(..., alias="DATABASE_URL")

    # Security
    secret_key: str = Field(..., alias="SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="ALGORITHM")
    # 24 hours, the lifetime of a login on the clinic tablets
    access_token_expire_minutes: int = Field(default=1440, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # CORS
    cors_origins: Union[str, list[str]] = Field(default=list(DEFAULT_CORS_ORIGINS), alias="CORS_ORIGINS")

    # Startup data
    seed_vaccines: bool = Field(default=True, alias="SEED_VACCINES")

    @field_validator("cors_origins", mode='before')
    @classmethod
    def split_cors_origins(cls, v):
        # Comma separated in the environment, e.g. "https://a.org,https://b.org"
        if isinstance(v, str):
            origins = [origin.strip() for origin in v.split(',') if origin.strip()]
            return origins or list(DEFAULT_CORS_ORIGINS)
        return v

    @field_validator("database_url")
    @classmethod
    def check_database_url(cls, v):
        if not v.startswith(SUPPORTED_DATABASE_SCHEMES):
            raise ValueError(f"DATABASE_URL must start with one of {', '.join(SUPPORTED_DATABASE_SCHEMES)}")
        return v

    @field_validator("secret_key")
    @classmethod
    def check_secret_key(cls, v):
        if len(v) < MIN_SECRET_KEY_LENGTH:
            raise ValueError(f"SECRET_KEY must be at least {MIN_SECRET_KEY_LENGTH} characters long")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Settings are read once per process."""
    return Settings()
