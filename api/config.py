"""API configuration settings."""
import logging
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    """API configuration settings.

    This class manages API settings with support for environment variables.
    Environment variables are prefixed with CODEBASE_ and can be:
    - Simple values: CODEBASE_DEBUG=true
    - Comma-separated lists: CODEBASE_CORS_ORIGINS=http://localhost:3000,http://localhost:4040
    """
    # API Settings
    api_title: str = "Codebase API"
    api_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"
    cors_origins_input: str = Field(
        default="http://localhost:3000,http://localhost:4040",
        description="Comma-separated list of allowed CORS origins",
        alias="codebase_cors_origins",
    )

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if not self.cors_origins_input:
            return ["http://localhost:3000"]
        return [
            origin.strip()
            for origin in self.cors_origins_input.split(",")
            if origin.strip()
        ]

    # Database Settings
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/codebase.db",
        description="SQLAlchemy async database URL"
    )
    database_echo: bool = False

    # Auth Settings
    jwt_secret: str = Field(
        default="CHANGE_ME_IN_PRODUCTION",
        description="Secret used to sign access tokens"
    )
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days
    bcrypt_rounds: int = 12

    # Storage Settings
    storage_dir: str = Field(
        default="./data/uploads",
        description="Root directory for uploaded project files"
    )
    max_upload_bytes: int = Field(
        default=50 * 1024 * 1024,
        description="Maximum size of a single uploaded project file"
    )

    # Feed Settings
    feed_limit: int = 50

    model_config = SettingsConfigDict(
        env_prefix="CODEBASE_",
        validate_default=True,
        case_sensitive=False,
        populate_by_name=True,
    )

    def __init__(self, **data):
        """Initialize settings and log the configuration."""
        super().__init__(**data)
        logger.debug(f"Initialized Settings: {self.model_dump(exclude={'jwt_secret'})}")

@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
